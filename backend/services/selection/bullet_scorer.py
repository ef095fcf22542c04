"""Bullet scoring against job signals.

score = clamp(similarity * 0.65 + tool_boost + metric_boost)

Similarity is the best cosine against the query embeddings (or the job
embedding when there are no queries). Tool and metric boosts are flat
additions so neither alone lifts a low-similarity bullet to the top.
"""

import re

from models.schemas.job import JobSelectionSignals
from models.schemas.profile import Bullet
from models.schemas.selection import BulletScoreBreakdown, TargetedBullet
from services.similarity import clamp, max_similarity

W_SIMILARITY = 0.65
TOOL_BOOST = 0.2
METRIC_BOOST = 0.15
MAX_TOOL_MATCHES = 5

_METRIC_RE = re.compile(r"[\d%$]")


def has_metric(text: str) -> bool:
    return bool(_METRIC_RE.search(text or ""))


def match_hard_skills(text: str, hard_skills: list[str]) -> list[str]:
    """Case-insensitive substring hits of hard skills in text, max 5."""
    if not text:
        return []
    lowered = text.lower()
    return [skill for skill in hard_skills if skill and skill in lowered][:MAX_TOOL_MATCHES]


def _hard_skill_tokens(signals: JobSelectionSignals) -> list[str]:
    seen: set[str] = set()
    tokens: list[str] = []
    for skill in signals.parsed_job.hard_skills:
        lowered = skill.lower()
        if lowered not in seen:
            seen.add(lowered)
            tokens.append(lowered)
    return tokens


def score_bullet(bullet: Bullet, signals: JobSelectionSignals, hard_skills: list[str]) -> TargetedBullet:
    similarity = max_similarity(bullet.embedding, signals.query_embeddings, signals.job_embedding)
    tool_matches = match_hard_skills(bullet.text, hard_skills)
    metric = has_metric(bullet.text)

    tool_boost = TOOL_BOOST if tool_matches else 0.0
    metric_boost = METRIC_BOOST if metric else 0.0
    score = clamp(similarity * W_SIMILARITY + tool_boost + metric_boost)

    return TargetedBullet(
        id=bullet.id,
        experience_id=bullet.experience_id,
        text=bullet.text,
        score=score,
        similarity=similarity,
        has_metric=metric,
        tool_matches=tool_matches,
        source_ids=list(bullet.source_ids),
        score_breakdown=BulletScoreBreakdown(
            similarity=round(similarity, 3),
            tool_boost=round(tool_boost, 3),
            metric_boost=round(metric_boost, 3),
            final=round(score, 3),
        ),
    )


def score_bullets(bullets: list[Bullet], signals: JobSelectionSignals) -> list[TargetedBullet]:
    """Score all bullets, highest first. Ties keep input order."""
    if not bullets:
        return []
    hard_skills = _hard_skill_tokens(signals)
    scored = [score_bullet(bullet, signals, hard_skills) for bullet in bullets]
    return sorted(scored, key=lambda b: b.score, reverse=True)
