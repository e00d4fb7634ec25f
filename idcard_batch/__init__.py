"""Batch ID-card compositing and image resizing."""

__version__ = "0.1.0"
