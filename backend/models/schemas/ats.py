"""ATS keyword matching and scoring contracts."""

from typing import Any, Literal

from pydantic import BaseModel

KeywordPriority = Literal["critical", "important", "nice_to_have"]
MatchStatus = Literal["exact", "semantic", "partial", "missing"]


class JdKeyword(BaseModel):
    """One keyword/phrase extracted from a job description."""
    term: str
    variants: list[str] = []  # JD-provided synonyms
    category: KeywordPriority = "important"


class ExtractedKeywords(BaseModel):
    critical: list[JdKeyword] = []
    important: list[JdKeyword] = []
    nice_to_have: list[JdKeyword] = []
    domain_context: list[str] = []


class KeywordMatchResult(BaseModel):
    keyword: JdKeyword
    status: MatchStatus = "missing"
    score: float = 0.0  # 0-1
    matched_term: str | None = None


class CategoryResult(BaseModel):
    score: int = 100  # 0-100
    total_keywords: int = 0
    matched_count: int = 0
    matches: list[KeywordMatchResult] = []


class SemanticMetrics(BaseModel):
    """How much the embedding pass actually contributed.

    A zero upgrade ratio with failures > 0 means the provider degraded.
    """
    keywords_processed: int = 0
    keywords_upgraded: int = 0
    upgrade_ratio: float = 0.0
    embedding_attempts: int = 0
    embedding_failures: int = 0


class GroundedImprovement(BaseModel):
    keyword: str
    priority: Literal["critical", "important"]
    suggestion: str
    is_verified_skill: bool = False


class AtsScoreResult(BaseModel):
    final_score: int = 0
    score_interpretation: str = ""
    recommendation: str = ""
    category_breakdown: dict[KeywordPriority, CategoryResult] = {}
    strengths: list[str] = []
    gaps: list[str] = []
    actionable_improvements: list[GroundedImprovement] = []
    semantic_metrics: SemanticMetrics = SemanticMetrics()


def parse_extracted_keywords(raw: dict[str, Any] | None) -> ExtractedKeywords:
    """Normalize a keyword-extraction payload into tiered JdKeyword lists.

    Items may be `{"term": ..., "variants": [...]}` objects or bare strings;
    blank terms are dropped.
    """
    raw = raw or {}

    def _tier(items: Any, category: KeywordPriority) -> list[JdKeyword]:
        keywords: list[JdKeyword] = []
        for item in items or []:
            if isinstance(item, str):
                term, variants = item, []
            elif isinstance(item, dict):
                term, variants = item.get("term") or "", item.get("variants") or []
            else:
                continue
            term = str(term).strip()
            if not term:
                continue
            keywords.append(JdKeyword(
                term=term,
                variants=[str(v).strip() for v in variants if str(v).strip()],
                category=category,
            ))
        return keywords

    return ExtractedKeywords(
        critical=_tier(raw.get("critical"), "critical"),
        important=_tier(raw.get("important"), "important"),
        nice_to_have=_tier(raw.get("nice_to_have"), "nice_to_have"),
        domain_context=[
            str(term).strip() for term in raw.get("domain_context") or [] if str(term).strip()
        ],
    )
