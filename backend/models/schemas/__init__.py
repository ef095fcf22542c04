"""Pydantic contracts for the selection engine and the ATS scorer."""

from models.schemas.ats import (
    AtsScoreResult,
    ExtractedKeywords,
    JdKeyword,
    KeywordMatchResult,
    SemanticMetrics,
)
from models.schemas.job import JobSelectionSignals, ParsedJobDescription, TargetJobContext
from models.schemas.profile import Bullet, CanonicalProfile, Experience, Skill
from models.schemas.selection import (
    SelectionOptions,
    TargetAwareProfile,
    TargetedBullet,
    TargetedExperience,
    WriterExperience,
)

__all__ = [
    "AtsScoreResult",
    "ExtractedKeywords",
    "JdKeyword",
    "KeywordMatchResult",
    "SemanticMetrics",
    "JobSelectionSignals",
    "ParsedJobDescription",
    "TargetJobContext",
    "Bullet",
    "CanonicalProfile",
    "Experience",
    "Skill",
    "SelectionOptions",
    "TargetAwareProfile",
    "TargetedBullet",
    "TargetedExperience",
    "WriterExperience",
]
