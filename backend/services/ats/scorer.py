"""ATS score calculation: category scores, weighted blend and feedback.

Category score = mean keyword score x 100 (empty category = 100).
Final = critical 0.40 + important 0.35 + nice_to_have 0.25, with an empty
category's weight folded into the present ones so weights sum to 1.0.
"""

import logging
import math

from models.schemas.ats import (
    AtsScoreResult,
    CategoryResult,
    ExtractedKeywords,
    GroundedImprovement,
    KeywordMatchResult,
    KeywordPriority,
    SemanticMetrics,
)
from services.ats.matcher import match_keywords
from services.ats.semantic import enhance_with_semantic_matching
from services.embeddings import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: dict[KeywordPriority, float] = {
    "critical": 0.40,
    "important": 0.35,
    "nice_to_have": 0.25,
}

# Where an empty category's weight goes, critical first then nice-to-have
REDISTRIBUTION: dict[KeywordPriority, dict[KeywordPriority, float]] = {
    "critical": {"important": 0.20, "nice_to_have": 0.15},
    "important": {"critical": 0.20, "nice_to_have": 0.15},
    "nice_to_have": {"critical": 0.15, "important": 0.10},
}

# (min score, label), checked in order
SCORE_BANDS: list[tuple[int, str]] = [
    (90, "Excellent Match (90-100%)"),
    (75, "Good Match (75-89%)"),
    (60, "Moderate Match (60-74%)"),
    (40, "Average Match (40-59%)"),
]
WEAK_BAND = "Weak Match (<40%)"

SAFE_TO_APPLY_ABOVE = 75
MAX_IMPROVEMENTS = 5
MAX_CRITICAL_IMPROVEMENTS = 3
STRENGTH_SCORE = 0.9


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def category_result(matches: list[KeywordMatchResult]) -> CategoryResult:
    if not matches:
        return CategoryResult()
    mean = sum(m.score for m in matches) / len(matches)
    return CategoryResult(
        score=round_half_up(mean * 100),
        total_keywords=len(matches),
        matched_count=sum(1 for m in matches if m.score > 0),
        matches=list(matches),
    )


def category_weights(categories: dict[KeywordPriority, CategoryResult]) -> dict[KeywordPriority, float]:
    """Blend weights for the present (non-empty) categories, summing to 1.0."""
    present = [name for name, result in categories.items() if result.total_keywords]
    if not present:
        return {}
    weights = {name: DEFAULT_WEIGHTS[name] for name in present}
    for name, result in categories.items():
        if result.total_keywords:
            continue
        for target, share in REDISTRIBUTION[name].items():
            if target in weights:
                weights[target] += share
    total = sum(weights.values())
    return {name: weight / total for name, weight in weights.items()}


def interpret_score(score: int) -> str:
    for minimum, label in SCORE_BANDS:
        if score >= minimum:
            return label
    return WEAK_BAND


def _is_verified(keyword: str, skill_pool: set[str]) -> bool:
    keyword = keyword.lower()
    return keyword in skill_pool or any(s in keyword or keyword in s for s in skill_pool)


def build_improvements(
    critical: list[KeywordMatchResult],
    important: list[KeywordMatchResult],
    skill_pool: list[str] | None = None,
) -> list[GroundedImprovement]:
    """Up to 3 critical gaps, then important gaps, at most 5 in total."""
    pool = {s.strip().lower() for s in skill_pool or [] if s and s.strip()}
    improvements: list[GroundedImprovement] = []

    for match in [m for m in critical if m.score == 0][:MAX_CRITICAL_IMPROVEMENTS]:
        keyword = match.keyword.term
        verified = _is_verified(keyword, pool)
        improvements.append(GroundedImprovement(
            keyword=keyword,
            priority="critical",
            suggestion=(
                f'Your profile includes "{keyword}" experience: make sure it is visible in your skills section'
                if verified
                else f'This role requires "{keyword}": consider whether any experience demonstrates it'
            ),
            is_verified_skill=verified,
        ))

    remaining = MAX_IMPROVEMENTS - len(improvements)
    for match in [m for m in important if m.score == 0][:remaining]:
        keyword = match.keyword.term
        verified = _is_verified(keyword, pool)
        improvements.append(GroundedImprovement(
            keyword=keyword,
            priority="important",
            suggestion=(
                f'Consider highlighting your "{keyword}" background more prominently'
                if verified
                else f'"{keyword}" is preferred: evaluate whether you have transferable experience'
            ),
            is_verified_skill=verified,
        ))

    return improvements


def build_strengths(
    critical: list[KeywordMatchResult],
    important: list[KeywordMatchResult],
    critical_result: CategoryResult,
) -> list[str]:
    critical_hits = [m.keyword.term for m in critical if m.score >= STRENGTH_SCORE][:3]
    important_hits = [m.keyword.term for m in important if m.score >= STRENGTH_SCORE][:2]

    strengths: list[str] = []
    if len(critical_hits) >= 2:
        strengths.append(f"Strong coverage of core requirements: {', '.join(critical_hits)}")
    elif critical_hits:
        strengths.append(f"Demonstrates expertise in {critical_hits[0]}")
    if important_hits:
        strengths.append(f"Also matches preferred qualifications: {', '.join(important_hits)}")
    if critical_result.total_keywords and critical_result.matched_count >= critical_result.total_keywords * 0.8:
        strengths.append("Excellent alignment with job requirements")
    if not strengths:
        strengths.append("Some relevant experience demonstrated")
    return strengths


def calculate_detailed_score(
    critical: list[KeywordMatchResult],
    important: list[KeywordMatchResult],
    nice_to_have: list[KeywordMatchResult],
    semantic_metrics: SemanticMetrics | None = None,
    skill_pool: list[str] | None = None,
) -> AtsScoreResult:
    """Score three tiers of match results into an AtsScoreResult."""
    categories: dict[KeywordPriority, CategoryResult] = {
        "critical": category_result(critical),
        "important": category_result(important),
        "nice_to_have": category_result(nice_to_have),
    }
    weights = category_weights(categories)
    if weights:
        final_score = round_half_up(sum(categories[name].score * w for name, w in weights.items()))
    else:
        final_score = 100

    # nice-to-have keywords are optional and never reported as gaps
    gaps = [m.keyword.term for m in critical if m.score == 0]
    gaps += [m.keyword.term for m in important if m.score == 0]

    return AtsScoreResult(
        final_score=final_score,
        score_interpretation=interpret_score(final_score),
        recommendation=(
            "Safe to apply." if final_score > SAFE_TO_APPLY_ABOVE
            else "Consider addressing gaps before applying."
        ),
        category_breakdown=categories,
        strengths=build_strengths(critical, important, categories["critical"]),
        gaps=gaps,
        actionable_improvements=build_improvements(critical, important, skill_pool),
        semantic_metrics=semantic_metrics or SemanticMetrics(),
    )


def score_resume(
    resume_text: str,
    keywords: ExtractedKeywords,
    skill_pool: list[str] | None = None,
) -> AtsScoreResult:
    """Lexical-only ATS score; no embedding provider involved."""
    return calculate_detailed_score(
        match_keywords(resume_text, keywords.critical),
        match_keywords(resume_text, keywords.important),
        match_keywords(resume_text, keywords.nice_to_have),
        skill_pool=skill_pool,
    )


def merge_metrics(*metrics: SemanticMetrics) -> SemanticMetrics:
    processed = sum(m.keywords_processed for m in metrics)
    upgraded = sum(m.keywords_upgraded for m in metrics)
    return SemanticMetrics(
        keywords_processed=processed,
        keywords_upgraded=upgraded,
        upgrade_ratio=upgraded / processed if processed else 0.0,
        embedding_attempts=sum(m.embedding_attempts for m in metrics),
        embedding_failures=sum(m.embedding_failures for m in metrics),
    )


async def run_ats_score(
    resume_text: str,
    keywords: ExtractedKeywords,
    provider: EmbeddingProvider | None = None,
    skill_pool: list[str] | None = None,
) -> AtsScoreResult:
    """Lexical matching plus the semantic upgrade pass for critical and important tiers.

    Nice-to-have keywords skip the semantic pass.
    """
    critical = match_keywords(resume_text, keywords.critical)
    important = match_keywords(resume_text, keywords.important)
    nice_to_have = match_keywords(resume_text, keywords.nice_to_have)

    critical, critical_metrics = await enhance_with_semantic_matching(critical, resume_text, provider)
    important, important_metrics = await enhance_with_semantic_matching(important, resume_text, provider)
    metrics = merge_metrics(critical_metrics, important_metrics)

    result = calculate_detailed_score(critical, important, nice_to_have, metrics, skill_pool)
    logger.info(
        "ATS score %d (%s); semantic upgrades %d/%d, embedding failures %d",
        result.final_score, result.score_interpretation,
        metrics.keywords_upgraded, metrics.keywords_processed, metrics.embedding_failures,
    )
    return result
