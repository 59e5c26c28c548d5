"""Mosaic: a shared wall of image tiles that snap together edge to edge."""

__version__ = "0.1.0"
