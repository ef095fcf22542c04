"""Target-aware experience selection.

Flow:
    CanonicalProfile + TargetJobContext + JobSelectionSignals
      ├─ validate experiences      → eligible / filtered
      ├─ score bullets + budget    → TargetedBullet[] per experience
      ├─ score experiences         → score, signals, alignment gate
      ├─ three-tier fill           → aligned ≥ min_score, aligned < min_score, misaligned
      └─ writer payload + skills + diagnostics → TargetAwareProfile

Never raises for data-quality problems; they end up in diagnostics.
"""

import logging
from datetime import date

from config import settings
from models.schemas.job import JobSelectionSignals, TargetJobContext
from models.schemas.profile import CanonicalProfile, Experience, Skill
from models.schemas.selection import (
    ExperienceIssueReport,
    ScoreSignals,
    ScoringSummaryEntry,
    SelectionDiagnostics,
    SelectionOptions,
    SelectionTier,
    TargetAwareProfile,
    TargetedBullet,
    TargetedExperience,
    WriterBulletCandidate,
    WriterExperience,
)
from services.experience_validator import experience_label, filter_eligible_experiences
from services.selection.budget import bullet_budget, writer_candidate_cap
from services.selection.bullet_scorer import score_bullets
from services.selection.experience_scorer import score_experience
from services.selection.job_keywords import build_job_keywords

logger = logging.getLogger(__name__)

KEYWORD_SAMPLE_SIZE = 10


def select_target_aware_profile(
    profile: CanonicalProfile,
    job: TargetJobContext,
    signals: JobSelectionSignals,
    options: SelectionOptions | None = None,
) -> TargetAwareProfile:
    """Rank, budget and select experiences for one target job."""
    options = options or SelectionOptions()
    max_experiences = options.max_experiences or settings.selection_max_experiences
    min_score = settings.selection_min_score if options.min_score is None else options.min_score
    max_writer = options.max_writer_experiences or max_experiences
    skill_cap = settings.skill_pool_cap if options.skill_pool_cap is None else options.skill_pool_cap
    as_of = options.as_of or date.today()

    parsed_job = signals.parsed_job
    job_keywords = build_job_keywords(job, parsed_job)
    score_keywords = job_keywords[: settings.keyword_score_limit]

    batch = filter_eligible_experiences(profile.experiences)
    warnings = list(batch.warnings)

    scored: list[TargetedExperience] = []
    for validation in batch.eligible:
        experience = validation.experience
        # rank is the position in the canonical (recency-ordered) list
        targeted = _score_one(experience, validation.index, signals, score_keywords, as_of)
        warnings.extend(_bullet_warnings(experience, targeted))
        scored.append(targeted)

    aligned = sorted((t for t in scored if t.alignment_eligible), key=lambda t: t.score, reverse=True)
    misaligned = sorted((t for t in scored if not t.alignment_eligible), key=lambda t: t.score, reverse=True)

    selected: list[TargetedExperience] = []
    tiers: list[tuple[SelectionTier, list[TargetedExperience]]] = [
        ("aligned", [t for t in aligned if t.score >= min_score]),
        ("aligned_below_threshold", [t for t in aligned if t.score < min_score]),
        ("misaligned_fallback", misaligned),
    ]
    for tier, pool in tiers:
        added = 0
        for targeted in pool:
            if len(selected) >= max_experiences:
                break
            selected.append(targeted.model_copy(update={"selection_tier": tier}))
            added += 1
        if added and tier == "aligned_below_threshold":
            warnings.append(
                f"Used {added} aligned experience(s) scoring below min_score={min_score:.2f}"
            )
        elif added and tier == "misaligned_fallback":
            warnings.append(
                f"Used {added} misaligned experience(s) as low-confidence fallback"
            )

    writer_experiences: list[WriterExperience] = []
    for targeted in selected:
        if not targeted.writer_context.bullet_candidates:
            warnings.append(
                f"{experience_label(targeted.experience)} selected but has no writer-ready bullets"
            )
            continue
        if len(writer_experiences) < max_writer:
            writer_experiences.append(targeted.writer_context)

    diagnostics = SelectionDiagnostics(
        total_experiences=len(profile.experiences),
        eligible_experiences=len(batch.eligible),
        filtered_experiences=[
            _issue_report(v.experience, v.messages) for v in batch.filtered
        ],
        flagged_experiences=[
            _issue_report(v.experience, v.messages) for v in batch.eligible if v.issues
        ],
        alignment_filtered=[
            _issue_report(t.experience, t.alignment_reasons) for t in misaligned
        ],
        warnings=warnings,
        job_keyword_sample=job_keywords[:KEYWORD_SAMPLE_SIZE],
        scoring_summary=[_summary_entry(t) for t in selected],
    )

    logger.info(
        "Selected %d/%d experiences (eligible=%d, aligned=%d, writer=%d, warnings=%d)",
        len(selected), len(profile.experiences), len(batch.eligible),
        len(aligned), len(writer_experiences), len(warnings),
    )

    return TargetAwareProfile(
        experiences=selected,
        bullets=[bullet for t in selected for bullet in t.selected_bullets],
        skills=prioritize_skills(profile.skills, job.required_skills, skill_cap),
        writer_experiences=writer_experiences,
        diagnostics=diagnostics,
        parsed_job=parsed_job,
    )


def _score_one(
    experience: Experience,
    rank: int,
    signals: JobSelectionSignals,
    keywords: list[str],
    as_of: date,
) -> TargetedExperience:
    budget = bullet_budget(rank, experience.tenure(as_of))
    candidates = score_bullets(experience.bullets, signals)
    result = score_experience(experience, candidates, keywords, budget, as_of)

    # only bullets with real provenance reach the writer
    writer_bullets = [c for c in candidates if c.source_ids][: writer_candidate_cap(budget)]

    logger.debug(
        "Experience %s rank=%d budget=%d score=%.3f aligned=%s",
        experience.id, rank, budget, result.score, result.alignment_eligible,
    )

    return TargetedExperience(
        id=experience.id,
        experience=experience,
        rank=rank,
        bullet_budget=budget,
        bullet_candidates=candidates,
        selected_bullets=candidates[:budget],
        writer_context=WriterExperience(
            id=experience.id,
            title=experience.title,
            company=experience.company,
            location=experience.location,
            start_date=experience.start_date,
            end_date=experience.end_date,
            is_current=experience.is_current,
            bullet_budget=budget,
            bullet_candidates=[_writer_candidate(b) for b in writer_bullets],
        ),
        score=result.score,
        signals=result.signals,
        alignment_eligible=result.alignment_eligible,
        alignment_reasons=result.alignment_reasons,
    )


def _writer_candidate(bullet: TargetedBullet) -> WriterBulletCandidate:
    return WriterBulletCandidate(
        id=bullet.id,
        text=bullet.text,
        source_ids=list(bullet.source_ids),
        score=bullet.score,
        has_metric=bullet.has_metric,
        tool_matches=list(bullet.tool_matches),
        similarity=bullet.similarity,
        score_breakdown=bullet.score_breakdown,
    )


def _bullet_warnings(experience: Experience, targeted: TargetedExperience) -> list[str]:
    label = experience_label(experience)
    warnings: list[str] = []
    missing_embeddings = sum(1 for b in experience.bullets if not b.has_embedding)
    if missing_embeddings:
        warnings.append(
            f"{label}: {missing_embeddings} bullet(s) missing embeddings, similarity scored as 0"
        )
    missing_sources = sum(1 for b in targeted.bullet_candidates if not b.source_ids)
    if missing_sources:
        warnings.append(
            f"{label}: {missing_sources} bullet(s) without source ids withheld from writer"
        )
    return warnings


def _issue_report(experience: Experience, reasons: list[str]) -> ExperienceIssueReport:
    return ExperienceIssueReport(
        id=experience.id,
        title=experience.title,
        company=experience.company,
        reasons=list(reasons),
    )


def _summary_entry(targeted: TargetedExperience) -> ScoringSummaryEntry:
    signals = targeted.signals
    return ScoringSummaryEntry(
        experience_id=targeted.id,
        score=round(targeted.score, 3),
        bullet_budget=targeted.bullet_budget,
        selected_bullets=len(targeted.selected_bullets),
        selection_tier=targeted.selection_tier,
        signals=ScoreSignals(
            bullet_score=round(signals.bullet_score, 3),
            keyword_score=round(signals.keyword_score, 3),
            recency_score=round(signals.recency_score, 3),
            metric_density=round(signals.metric_density, 3),
        ),
    )


def prioritize_skills(skills: list[Skill], required_skills: list[str], cap: int) -> list[Skill]:
    """Job-required skills first, then the rest; deduped case-insensitively and capped."""
    required = {s.strip().lower() for s in required_skills if s and s.strip()}
    seen: set[str] = set()
    matched: list[Skill] = []
    others: list[Skill] = []
    for skill in skills:
        key = skill.canonical_name.strip().lower()
        if not key or key in seen:
            continue
        seen.add(key)
        (matched if key in required else others).append(skill)
    return (matched + others)[:cap]
