"""Job-side inputs to the selection engine: parsed JD, context and embeddings."""

from typing import Any, Literal

from pydantic import BaseModel, field_validator

JobSeniorityLevel = Literal["IC", "Senior IC", "Manager", "Director", "VP", "Executive"]


def _clean_list(value: Any) -> list[str]:
    if not value or isinstance(value, str):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


class ParsedJobDescription(BaseModel):
    """Structured signal extracted from a job posting (produced upstream).

    All list fields default to empty lists, never None.
    """
    normalized_title: str = ""
    level: JobSeniorityLevel = "IC"
    domain: str = "general"
    responsibilities: list[str] = []
    hard_skills: list[str] = []
    soft_skills: list[str] = []
    queries: list[str] = []
    key_phrases: list[str] = []  # multi-word ATS phrases

    @field_validator(
        "responsibilities", "hard_skills", "soft_skills", "queries", "key_phrases",
        mode="before",
    )
    @classmethod
    def _normalize_list(cls, value: Any) -> list[str]:
        return _clean_list(value)

    @field_validator("normalized_title", mode="before")
    @classmethod
    def _normalize_title(cls, value: Any) -> str:
        return str(value).strip() if value else ""

    @field_validator("domain", mode="before")
    @classmethod
    def _normalize_domain(cls, value: Any) -> str:
        cleaned = str(value).strip() if value else ""
        return cleaned or "general"

    @field_validator("level", mode="before")
    @classmethod
    def _default_level(cls, value: Any) -> Any:
        return value or "IC"


class JobSelectionSignals(BaseModel):
    """Numeric context paired with a parsed JD."""
    parsed_job: ParsedJobDescription = ParsedJobDescription()
    job_embedding: list[float] = []
    query_embeddings: list[list[float]] = []  # one per semantic query string


class TargetJobContext(BaseModel):
    """Raw job context supplied by the caller."""
    description: str = ""
    title: str | None = None
    required_skills: list[str] = []

    @field_validator("required_skills", mode="before")
    @classmethod
    def _normalize_required(cls, value: Any) -> list[str]:
        return _clean_list(value)
