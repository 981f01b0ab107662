"""
Learning: session composition and level progression.

- candidates: catalog record and the sortable PrioritizedItem view
- categorizer: four-bucket partition of a subject/level pool
- assembler: priority fill under a size cap, session type, rationale
- progression: level completion rule and capped level advance
"""

from sprout.learning.assembler import (
    DEFAULT_SESSION_SIZE,
    PracticeSessionService,
    SessionAssembler,
    SessionComposition,
    SessionRequirements,
    SessionType,
)
from sprout.learning.candidates import CandidateItem, PrioritizedItem, sort_by_priority
from sprout.learning.categorizer import CategorizedPool, SessionCategorizer
from sprout.learning.progression import (
    MAX_COMPLEXITY_LEVEL,
    advance_level,
    items_at_level,
    should_progress_level,
    should_progress_level_by_progress,
)

__all__ = [
    "CandidateItem",
    "PrioritizedItem",
    "sort_by_priority",
    "CategorizedPool",
    "SessionCategorizer",
    "DEFAULT_SESSION_SIZE",
    "PracticeSessionService",
    "SessionAssembler",
    "SessionComposition",
    "SessionRequirements",
    "SessionType",
    "MAX_COMPLEXITY_LEVEL",
    "advance_level",
    "items_at_level",
    "should_progress_level",
    "should_progress_level_by_progress",
]
