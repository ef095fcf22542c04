"""Canonical profile contracts: experiences, achievement bullets and skills.

These are produced by ingestion/canonicalization and are read-only for the
selection engine. Bullets may arrive as plain strings or as objects; both
are normalized here, once, into a single `Bullet` shape.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, field_validator, model_validator

from services.timeline import DEFAULT_TENURE_MONTHS, resolve_tenure_months


class Bullet(BaseModel):
    """One achievement line inside an experience."""
    id: str
    experience_id: str = ""
    text: str = ""
    embedding: list[float] | None = None
    source_ids: list[str] = []  # provenance, never invented downstream

    @field_validator("embedding", mode="before")
    @classmethod
    def _empty_embedding_is_none(cls, value: Any) -> Any:
        if value is None:
            return None
        if hasattr(value, "__len__") and len(value) == 0:
            return None
        return value

    @field_validator("source_ids", mode="before")
    @classmethod
    def _clean_source_ids(cls, value: Any) -> list[str]:
        if not value:
            return []
        if isinstance(value, str):
            value = [value]
        elif not isinstance(value, (list, tuple, set)):
            raise ValueError("source_ids must be a list of strings")
        return [str(item) for item in value if isinstance(item, str) and item.strip()]

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)


class Experience(BaseModel):
    """One employment/role record."""
    id: str
    title: str = ""
    company: str = ""
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    is_current: bool = False
    bullets: list[Bullet] = []
    tenure_months: int | None = None  # supplied tenure; see tenure()

    @model_validator(mode="before")
    @classmethod
    def _normalize_bullets(cls, data: Any) -> Any:
        """Accept bullets as strings or dicts and emit canonical bullet dicts."""
        if not isinstance(data, dict):
            return data
        raw_bullets = data.get("bullets")
        if not raw_bullets:
            data = {**data, "bullets": []}
            return data

        experience_id = str(data.get("id", ""))
        normalized: list[Any] = []
        for index, bullet in enumerate(raw_bullets):
            if isinstance(bullet, Bullet):
                if not bullet.experience_id:
                    bullet = bullet.model_copy(update={"experience_id": experience_id})
                normalized.append(bullet)
            elif isinstance(bullet, str):
                normalized.append({
                    "id": f"{experience_id}:{index}",
                    "experience_id": experience_id,
                    "text": bullet,
                })
            elif isinstance(bullet, dict):
                normalized.append({
                    "id": bullet.get("id") or f"{experience_id}:{index}",
                    "experience_id": bullet.get("experience_id") or experience_id,
                    "text": bullet.get("text") or bullet.get("content") or "",
                    "embedding": bullet.get("embedding"),
                    "source_ids": bullet.get("source_ids", bullet.get("sourceIds")),
                })
            # anything else is not a bullet and is skipped
        return {**data, "bullets": normalized}

    def tenure(self, as_of: date | None = None) -> int:
        """Supplied tenure, else months from start to end (or `as_of`), else 12."""
        if self.tenure_months and self.tenure_months >= 1:
            return self.tenure_months
        return resolve_tenure_months(
            self.start_date, self.end_date, self.is_current, as_of
        ) or DEFAULT_TENURE_MONTHS


class Skill(BaseModel):
    """A canonical skill with its display label."""
    id: str = ""
    canonical_name: str
    weight: float = 0.0
    category: str = ""
    source_skill_ids: list[str] = []


class CanonicalProfile(BaseModel):
    """Deduplicated, merged view of a user's work history.

    Experiences are expected in recency order (most recent first); the
    position in this list is the rank used for bullet budgets.
    """
    experiences: list[Experience]
    skills: list[Skill] = []
