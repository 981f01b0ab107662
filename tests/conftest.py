"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sprout.core.tracker import ProgressTracker  # noqa: E402
from sprout.learning.candidates import CandidateItem  # noqa: E402

# 2023-11-14 22:13:20 UTC
BASE_TIMESTAMP = 1_700_000_000_000


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


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
def make_tracker():
    """
    Build a tracker and replay outcomes one second apart.

    Usage:
        tracker = make_tracker("kn-001", outcomes=[True, True])
    """

    def _make(
        item_id: str = "item-1",
        learner_id: str = "learner-1",
        outcomes=(),
        start: int = BASE_TIMESTAMP,
    ) -> ProgressTracker:
        tracker = ProgressTracker.create_new(item_id, learner_id)
        for offset, correct in enumerate(outcomes):
            tracker.record_attempt(correct, start + offset * 1000)
        return tracker

    return _make


@pytest.fixture
def make_items():
    """Build CandidateItems for one subject/level with ids prefix-001, prefix-002, ..."""

    def _make(
        count: int, subject: str = "kannada", level: int = 1, prefix: str = "kn"
    ) -> list[CandidateItem]:
        return [
            CandidateItem(
                id=f"{prefix}-{n:03d}",
                subject=subject,
                complexity_level=level,
                text=f"word {n:03d}",
            )
            for n in range(1, count + 1)
        ]

    return _make


@pytest.fixture
def sample_catalog(tmp_path):
    """A small catalog file: three level-1 items and one level-2 item."""
    path = tmp_path / "kannada.json"
    path.write_text(
        json.dumps(
            {
                "subject": "kannada",
                "items": [
                    {"id": "kn-001", "text": "amma", "complexityLevel": 1},
                    {"id": "kn-002", "text": "appa", "complexityLevel": 1},
                    {"id": "kn-003", "text": "mane", "complexityLevel": 1},
                    {"id": "kn-101", "text": "shaale", "complexityLevel": 2},
                ],
            }
        ),
        encoding="utf-8",
    )
    return path
