"""
Delivery: collaborators around the practice engine.

- state_store: SQLite persistence of tracker snapshots and learner levels
- catalog: JSON content catalog loading
- guidance_cache: bounded cache for parent guidance
"""

from sprout.delivery.catalog import CatalogError, load_catalog, subject_index
from sprout.delivery.guidance_cache import GuidanceCache
from sprout.delivery.state_store import TrackerStore

__all__ = [
    "CatalogError",
    "GuidanceCache",
    "TrackerStore",
    "load_catalog",
    "subject_index",
]
