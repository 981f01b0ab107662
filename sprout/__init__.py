"""
Sprout: adaptive practice engine for a children's spaced-repetition trainer.

Subpackages:
- core: per-item mastery state machine, attempts, events, guidance
- learning: session categorization/assembly and level progression
- study: derived learning statistics (turnarounds, streaks)
- delivery: persistence, catalog loading and caching collaborators
- cli: Typer command line front end
"""

__version__ = "1.0.0"
