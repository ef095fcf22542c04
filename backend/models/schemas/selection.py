"""Selection engine outputs: scoring annotations, writer payload, diagnostics."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from models.schemas.job import ParsedJobDescription
from models.schemas.profile import Experience, Skill

SelectionTier = Literal["aligned", "aligned_below_threshold", "misaligned_fallback"]


class BulletScoreBreakdown(BaseModel):
    similarity: float = 0.0
    tool_boost: float = 0.0
    metric_boost: float = 0.0
    final: float = 0.0


class TargetedBullet(BaseModel):
    """Ephemeral per-pass scoring annotation for one bullet."""
    id: str
    experience_id: str = ""
    text: str = ""
    score: float = 0.0  # 0-1
    similarity: float = 0.0  # 0-1, best query cosine
    has_metric: bool = False
    tool_matches: list[str] = []  # up to 5 hard-skill hits
    source_ids: list[str] = []
    score_breakdown: BulletScoreBreakdown = BulletScoreBreakdown()


class ScoreSignals(BaseModel):
    bullet_score: float = 0.0
    keyword_score: float = 0.0
    recency_score: float = 0.0
    metric_density: float = 0.0


class ExperienceScore(BaseModel):
    """Output of the experience scorer."""
    score: float = 0.0
    signals: ScoreSignals = ScoreSignals()
    alignment_eligible: bool = False
    alignment_reasons: list[str] = []


class WriterBulletCandidate(BaseModel):
    id: str
    text: str
    source_ids: list[str]
    score: float
    has_metric: bool
    tool_matches: list[str] = []
    similarity: float
    score_breakdown: BulletScoreBreakdown = BulletScoreBreakdown()


class WriterExperience(BaseModel):
    """Reduced, budgeted experience handed to the resume writer."""
    id: str
    title: str
    company: str
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    is_current: bool | None = None
    bullet_budget: int
    bullet_candidates: list[WriterBulletCandidate] = []


class TargetedExperience(BaseModel):
    """An experience annotated with its relevance for one job."""
    id: str
    experience: Experience  # validated copy, the canonical record is untouched
    rank: int
    bullet_budget: int
    bullet_candidates: list[TargetedBullet] = []
    selected_bullets: list[TargetedBullet] = []
    writer_context: WriterExperience
    score: float = 0.0
    signals: ScoreSignals = ScoreSignals()
    alignment_eligible: bool = False
    alignment_reasons: list[str] = []
    selection_tier: SelectionTier | None = None


class ExperienceIssueReport(BaseModel):
    id: str | None = None
    title: str = ""
    company: str = ""
    reasons: list[str] = []


class ScoringSummaryEntry(BaseModel):
    experience_id: str
    score: float
    bullet_budget: int
    selected_bullets: int
    selection_tier: SelectionTier | None = None
    signals: ScoreSignals = ScoreSignals()


class SelectionDiagnostics(BaseModel):
    total_experiences: int = 0
    eligible_experiences: int = 0
    filtered_experiences: list[ExperienceIssueReport] = []  # dropped by validation
    flagged_experiences: list[ExperienceIssueReport] = []  # kept, with non-blocking issues
    alignment_filtered: list[ExperienceIssueReport] = []  # misaligned
    warnings: list[str] = []
    job_keyword_sample: list[str] = []
    scoring_summary: list[ScoringSummaryEntry] = []


class SelectionOptions(BaseModel):
    """Per-call overrides; None means "use config.settings"."""
    max_experiences: int | None = Field(default=None, ge=1)
    min_score: float | None = Field(default=None, ge=0.0, le=1.0)
    max_writer_experiences: int | None = Field(default=None, ge=1)
    skill_pool_cap: int | None = Field(default=None, ge=0)
    as_of: date | None = None  # reference date for recency, defaults to today


class TargetAwareProfile(BaseModel):
    experiences: list[TargetedExperience] = []
    bullets: list[TargetedBullet] = []  # flattened selected bullets
    skills: list[Skill] = []
    writer_experiences: list[WriterExperience] = []
    diagnostics: SelectionDiagnostics = SelectionDiagnostics()
    parsed_job: ParsedJobDescription = ParsedJobDescription()
