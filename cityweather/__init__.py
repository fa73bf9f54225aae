"""Historical weather collection for US cities from NOAA Climate Data Online."""

__version__ = "0.1.0"
