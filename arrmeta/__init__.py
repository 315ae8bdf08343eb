"""Arrmeta: console client for the torrent-to-arr metadata mapping table."""

from .__version__ import __version__

__all__ = ["__version__"]
