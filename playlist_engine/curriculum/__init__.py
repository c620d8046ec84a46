"""Curriculum adapters: raw catalog records -> engine input."""

from playlist_engine.curriculum.unit_source import (
    load_units_file,
    map_adaptive_profile,
    map_adaptive_settings,
    map_learning_unit,
    map_learning_units,
)

__all__ = [
    "load_units_file",
    "map_adaptive_profile",
    "map_adaptive_settings",
    "map_learning_unit",
    "map_learning_units",
]
