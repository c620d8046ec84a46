"""
Unit Source Adapter.

Maps raw catalog records (as returned by the course API or exported to JSON)
into the engine's static input shape.

Records arrive in arbitrary order, with camelCase or snake_case keys, and
often without adaptive metadata. Units come back sorted by ``sequence``;
``adaptive`` stays None when a record carries none.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from playlist_engine.core.models import (
    AdaptiveMode,
    CourseAdaptiveSettings,
    DEFAULT_ADAPTIVE_SETTINGS,
    GateConfig,
    LearningUnitAdaptive,
    StaticLearningUnit,
)

# Raw key aliases: canonical field -> accepted record keys
UNIT_KEYS: dict[str, tuple[str, ...]] = {
    "id": ("id", "_id", "luId", "lu_id"),
    "title": ("title", "name"),
    "type": ("type",),
    "content_id": ("contentId", "content_id"),
    "category": ("category",),
    "is_required": ("isRequired", "is_required"),
    "sequence": ("sequence", "order", "position"),
    "estimated_duration": ("estimatedDuration", "estimated_duration"),
}

ADAPTIVE_KEYS: dict[str, tuple[str, ...]] = {
    "teaches_nodes": ("teachesNodes", "teaches_nodes"),
    "assesses_nodes": ("assessesNodes", "assesses_nodes"),
    "is_gate": ("isGate", "is_gate"),
    "is_skippable": ("isSkippable", "is_skippable"),
}

GATE_KEYS: dict[str, tuple[str, ...]] = {
    "mastery_threshold": ("masteryThreshold", "mastery_threshold"),
    "min_questions": ("minQuestions", "min_questions"),
    "max_retries": ("maxRetries", "max_retries"),
    "fail_strategy": ("failStrategy", "fail_strategy"),
}

SETTINGS_KEYS: dict[str, tuple[str, ...]] = {
    "mode": ("mode", "adaptiveMode", "adaptive_mode"),
    "allow_learner_choice": ("allowLearnerChoice", "allow_learner_choice"),
    "pre_assessment_enabled": ("preAssessmentEnabled", "pre_assessment_enabled"),
}


def _pick(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def _extract(record: Mapping[str, Any], key_map: dict[str, tuple[str, ...]]) -> dict[str, Any]:
    """Collect canonical fields present in a raw record."""
    fields = {}
    for name, keys in key_map.items():
        value = _pick(record, keys)
        if value is not None:
            fields[name] = value
    return fields


def map_adaptive_profile(raw: Optional[Mapping[str, Any]]) -> Optional[LearningUnitAdaptive]:
    """Map a raw adaptive block. Returns None when the record has none."""
    if not raw:
        return None

    fields = _extract(raw, ADAPTIVE_KEYS)
    gate_raw = _pick(raw, ("gateConfig", "gate_config"))
    if gate_raw:
        fields["gate_config"] = GateConfig(**_extract(gate_raw, GATE_KEYS))
    return LearningUnitAdaptive(**fields)


def map_learning_unit(record: Mapping[str, Any]) -> StaticLearningUnit:
    """
    Map one raw catalog record to a StaticLearningUnit.

    Raises:
        ValidationError: If required fields are missing or malformed
    """
    fields = _extract(record, UNIT_KEYS)
    if "id" in fields:
        fields["id"] = str(fields["id"])
    fields["adaptive"] = map_adaptive_profile(_pick(record, ("adaptive", "adaptiveMetadata")))
    return StaticLearningUnit(**fields)


def map_learning_units(records: Iterable[Mapping[str, Any]]) -> list[StaticLearningUnit]:
    """
    Map raw catalog records to units sorted by sequence.

    Records that cannot be mapped are skipped with a warning.
    Ties keep their original order.
    """
    units = []
    for position, record in enumerate(records):
        try:
            units.append(map_learning_unit(record))
        except (ValidationError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping learning unit record #{position}: {e}")

    units.sort(key=lambda lu: lu.sequence)
    logger.debug(f"Mapped {len(units)} learning units")
    return units


def map_adaptive_settings(course: Optional[Mapping[str, Any]]) -> CourseAdaptiveSettings:
    """
    Read a course's adaptive settings.

    Accepts either the settings block itself or a course record holding it
    under ``adaptiveSettings``. Missing settings or an unknown mode fall back
    to the default ("off").
    """
    if not course:
        return DEFAULT_ADAPTIVE_SETTINGS

    raw = _pick(course, ("adaptiveSettings", "adaptive_settings")) or course
    fields = _extract(raw, SETTINGS_KEYS)

    mode = fields.get("mode")
    if mode is not None:
        try:
            fields["mode"] = AdaptiveMode(str(mode).lower())
        except ValueError:
            logger.warning(f"Unknown adaptive mode {mode!r}; using 'off'")
            fields["mode"] = AdaptiveMode.OFF

    return CourseAdaptiveSettings(**fields)


def load_units_file(path: Path | str) -> tuple[list[StaticLearningUnit], Optional[CourseAdaptiveSettings]]:
    """
    Load units (and optional course settings) from a JSON export.

    The file holds either a list of unit records, or an object with
    ``units`` and optionally ``adaptiveSettings``.

    Returns:
        Tuple of (sorted units, course settings or None if the file has none)
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, list):
        return map_learning_units(data), None

    units = map_learning_units(data.get("units") or data.get("learningUnits") or [])
    settings_raw = _pick(data, ("adaptiveSettings", "adaptive_settings"))
    settings = map_adaptive_settings(settings_raw) if settings_raw else None
    return units, settings
