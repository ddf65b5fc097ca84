"""Quadtree playback of black-and-white video: decoding, playback control and pygame rendering."""

__version__ = "0.1.0"