"""
Subject display configuration.

Display names and parent tips per subject code. Only the CLI reads this;
the core engine never knows which subject it is tracking.
"""

from __future__ import annotations

from dataclasses import dataclass

TRACE_TIP = "Trace in air + say the sound."
RETELL_TIP = "One-line re-tell before Next."


@dataclass(frozen=True)
class SubjectConfig:
    display_name: str
    parent_tip: str | None = None


# Add new subjects here.
SUBJECT_MAP: dict[str, SubjectConfig] = {
    "english": SubjectConfig("English", "Have them read it again."),
    "englishquestions": SubjectConfig("English Questions"),
    "kannada": SubjectConfig("Kannada"),
    "kannadaalphabets": SubjectConfig("Kannada Alphabets", TRACE_TIP),
    "kannadawords": SubjectConfig("Kannada Words"),
    "hindi": SubjectConfig("Hindi"),
    "hindialphabets": SubjectConfig("Hindi Alphabets", TRACE_TIP),
    "mathtables": SubjectConfig("Math Tables", "Ask them to explain the step."),
    "math": SubjectConfig("Math"),
    "geography": SubjectConfig("Geography"),
    "hanuman": SubjectConfig("Hanuman Chalisa", RETELL_TIP),
    "comprehension": SubjectConfig("Story Comprehension", RETELL_TIP),
    "humanbody": SubjectConfig("Human Body"),
    "nationalsymbols": SubjectConfig("National Symbols"),
    "indiageography": SubjectConfig("India Geography"),
    "grampanchayat": SubjectConfig("Gram Panchayat"),
}


class SubjectConfiguration:
    """Lookup over SUBJECT_MAP, or a caller-supplied map in tests."""

    def __init__(self, subjects: dict[str, SubjectConfig] | None = None):
        self._subjects = SUBJECT_MAP if subjects is None else subjects

    def display_name(self, subject: str) -> str:
        """Configured name, else the code with its first letter upper-cased."""
        config = self._subjects.get(subject)
        if config is not None:
            return config.display_name
        return subject[:1].upper() + subject[1:]

    def parent_tip(self, subject: str) -> str | None:
        config = self._subjects.get(subject)
        return config.parent_tip if config else None

    def is_configured(self, subject: str) -> bool:
        return subject in self._subjects
