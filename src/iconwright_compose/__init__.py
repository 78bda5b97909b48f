"""Iconwright Compose - Icon raster composition and command-line front end."""
