"""Renderers turning built entities into infrastructure documents."""
