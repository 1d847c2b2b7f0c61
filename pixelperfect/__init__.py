"""Booking core for the PixelPerfect photography studio."""

__version__ = "0.1.0"
