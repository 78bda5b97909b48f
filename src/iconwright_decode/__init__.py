"""Iconwright Decode - icns container scanning and image extraction."""
