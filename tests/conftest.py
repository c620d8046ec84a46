"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_unit_records():
    """Raw catalog records as exported by the course API (unsorted, mixed metadata)."""
    return [
        {
            "id": "gate-1",
            "title": "Checkpoint: Subnetting",
            "type": "assessment",
            "contentId": "c-gate",
            "category": "gate",
            "isRequired": True,
            "sequence": 3,
            "estimatedDuration": 15,
            "adaptive": {
                "teachesNodes": [],
                "assessesNodes": ["node-1", "node-2"],
                "isGate": True,
                "isSkippable": False,
                "gateConfig": {
                    "masteryThreshold": 0.8,
                    "minQuestions": 3,
                    "maxRetries": 1,
                    "failStrategy": "prescribe-review",
                },
            },
        },
        {
            "id": "lu-1",
            "title": "Binary Basics",
            "type": "media",
            "contentId": "c-1",
            "category": "topic",
            "isRequired": True,
            "sequence": 1,
            "estimatedDuration": 10,
            "adaptive": {
                "teachesNodes": ["node-1"],
                "assessesNodes": [],
                "isGate": False,
                "isSkippable": True,
            },
        },
        {
            "id": "lu-2",
            "title": "Subnet Masks",
            "type": "media",
            "contentId": "c-2",
            "category": "topic",
            "isRequired": True,
            "sequence": 2,
            "estimatedDuration": 12,
            "adaptive": {
                "teachesNodes": ["node-2"],
                "assessesNodes": [],
                "isGate": False,
                "isSkippable": False,
            },
        },
        {
            "id": "lu-4",
            "title": "Wrap-up",
            "type": "media",
            "contentId": "c-4",
            "category": "topic",
            "isRequired": False,
            "sequence": 4,
            "estimatedDuration": None,
        },
    ]
