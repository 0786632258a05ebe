"""Split PDF documents into single pages and rasterize a thumbnail for each."""

__version__ = "0.1.0"
