"""Pressroom: music-press search, analysis and sharing service."""

__version__ = "0.1.0"
