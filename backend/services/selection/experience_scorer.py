"""Experience relevance scoring.

score = clamp(0.55 * bullet_score + 0.2 * keyword_score
              + 0.2 * recency_score + 0.05 * metric_density)

An experience is alignment-eligible when either its semantic bullet
signal or its keyword signal clears its floor.
"""

from datetime import date

from models.schemas.profile import Experience
from models.schemas.selection import ExperienceScore, ScoreSignals, TargetedBullet
from services.similarity import clamp
from services.timeline import months_between, resolve_end

W_BULLET = 0.55
W_KEYWORD = 0.2
W_RECENCY = 0.2
W_METRIC = 0.05

SEMANTIC_ALIGNMENT_FLOOR = 0.30
KEYWORD_ALIGNMENT_FLOOR = 0.20

# (max months since end, score), checked in order
RECENCY_STEPS: list[tuple[int, float]] = [
    (6, 1.0),
    (12, 0.9),
    (36, 0.7),
    (60, 0.5),
    (120, 0.3),
]
RECENCY_FLOOR = 0.15
RECENCY_UNKNOWN = 0.35

PHRASE_WEIGHT = 2.0
WORD_WEIGHT = 1.0
SCATTERED_PHRASE_CREDIT = 0.5


def compute_bullet_score(bullets: list[TargetedBullet]) -> float:
    """Position-weighted mean similarity; weight = max(0.35, 1 - 0.1 * i)."""
    if not bullets:
        return 0.0
    weights = [max(0.35, 1 - 0.1 * i) for i in range(len(bullets))]
    weighted = sum(clamp(b.similarity) * w for b, w in zip(bullets, weights))
    return clamp(weighted / sum(weights))


def compute_keyword_score(
    experience: Experience, bullets: list[TargetedBullet], keywords: list[str]
) -> float:
    """Phrase-weighted keyword coverage over title, company, location and bullets.

    Multi-word phrases weigh 2x single words. A phrase whose words all
    appear but not adjacently earns half its weight.
    """
    keywords = [k for k in dict.fromkeys(k.lower().strip() for k in keywords) if k]
    if not keywords:
        return 0.0

    haystack = " ".join(
        part for part in (
            experience.title,
            experience.company,
            experience.location,
            *(b.text for b in bullets),
        ) if part
    ).lower()

    hits = 0.0
    total = 0.0
    for keyword in keywords:
        is_phrase = " " in keyword
        weight = PHRASE_WEIGHT if is_phrase else WORD_WEIGHT
        total += weight
        if keyword in haystack:
            hits += weight
        elif is_phrase and all(word in haystack for word in keyword.split()):
            hits += weight * SCATTERED_PHRASE_CREDIT

    return clamp(hits / max(total, 1.0))


def compute_recency_score(experience: Experience, as_of: date | None = None) -> float:
    """Step function over whole months since the role ended."""
    as_of = as_of or date.today()
    end = resolve_end(experience.end_date, experience.is_current, as_of)
    if end is None:
        return RECENCY_UNKNOWN
    months_ago = months_between(end, (as_of.year, as_of.month))
    for max_months, score in RECENCY_STEPS:
        if months_ago <= max_months:
            return score
    return RECENCY_FLOOR


def compute_metric_density(bullets: list[TargetedBullet]) -> float:
    if not bullets:
        return 0.0
    return clamp(sum(1 for b in bullets if b.has_metric) / len(bullets))


def alignment_reasons(bullet_score: float, keyword_score: float) -> list[str]:
    """Empty when aligned; otherwise one reason per failed floor."""
    if bullet_score >= SEMANTIC_ALIGNMENT_FLOOR or keyword_score >= KEYWORD_ALIGNMENT_FLOOR:
        return []
    return [
        f"semantic_alignment={bullet_score:.2f} (<{SEMANTIC_ALIGNMENT_FLOOR:.2f})",
        f"keyword_alignment={keyword_score:.2f} (<{KEYWORD_ALIGNMENT_FLOOR:.2f})",
    ]


def score_experience(
    experience: Experience,
    bullet_candidates: list[TargetedBullet],
    job_keywords: list[str],
    budget: int,
    as_of: date | None = None,
) -> ExperienceScore:
    """Score one experience using only its budget-selected bullets."""
    selected = bullet_candidates[:budget]

    bullet_score = compute_bullet_score(selected)
    keyword_score = compute_keyword_score(experience, selected, job_keywords)
    recency_score = compute_recency_score(experience, as_of)
    metric_density = compute_metric_density(selected)

    score = clamp(
        bullet_score * W_BULLET
        + keyword_score * W_KEYWORD
        + recency_score * W_RECENCY
        + metric_density * W_METRIC
    )
    reasons = alignment_reasons(bullet_score, keyword_score)

    return ExperienceScore(
        score=score,
        signals=ScoreSignals(
            bullet_score=bullet_score,
            keyword_score=keyword_score,
            recency_score=recency_score,
            metric_density=metric_density,
        ),
        alignment_eligible=not reasons,
        alignment_reasons=reasons,
    )
