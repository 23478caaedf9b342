"""Rival Radar -- rival drone simulation and geospatial radar rendering."""

__version__ = "0.1.0"
