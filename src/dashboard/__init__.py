"""Rival Radar dashboard -- HTTP shell, target records and viewer."""
