"""Azure Fleet – elastic compute topology builders."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("az-fleet")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
