"""Riffus - music search proxy over iTunes, Deezer or Spotify."""

__version__ = "1.0.0"
