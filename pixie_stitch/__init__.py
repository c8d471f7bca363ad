"""Pixel-art to cross-stitch pattern converter."""

__version__ = "0.3.0"
