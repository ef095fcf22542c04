"""Embedding-based upgrade pass for keywords lexical matching missed.

Resume skill phrases and missing keywords are embedded concurrently; each
embedding call is isolated so one failure never aborts the batch. The
returned SemanticMetrics tell the caller whether to trust the pass.
"""

import asyncio
import logging

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from config import settings
from models.schemas.ats import KeywordMatchResult, SemanticMetrics
from services.ats.skill_phrases import extract_resume_skill_phrases
from services.embeddings import EmbeddingProvider

logger = logging.getLogger(__name__)


async def _embed_all(provider: EmbeddingProvider, texts: list[str]) -> tuple[list[list[float] | None], int]:
    """Embed texts concurrently. Returns (vectors with None for failures, failure count)."""
    outcomes = await asyncio.gather(*(provider.aembed(text) for text in texts), return_exceptions=True)
    vectors: list[list[float] | None] = []
    failures = 0
    for text, outcome in zip(texts, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.debug("Embedding failed for %r: %s", text, outcome)
            failures += 1
            vectors.append(None)
        elif outcome is None or len(outcome) == 0:
            failures += 1
            vectors.append(None)
        else:
            vectors.append(list(outcome))
    return vectors, failures


async def enhance_with_semantic_matching(
    results: list[KeywordMatchResult],
    resume_text: str,
    provider: EmbeddingProvider | None,
) -> tuple[list[KeywordMatchResult], SemanticMetrics]:
    """Upgrade `missing` results whose keyword is close to a resume skill phrase.

    similarity >= ats_semantic_threshold → semantic (ats_semantic_score)
    similarity >= ats_partial_threshold  → partial (ats_partial_score)
    """
    missing_idx = [i for i, r in enumerate(results) if r.status == "missing"]
    if not missing_idx:
        return results, SemanticMetrics()

    processed = len(missing_idx)
    if provider is None:
        logger.info("Semantic matching skipped: no embedding provider")
        return results, SemanticMetrics(keywords_processed=processed)

    phrases = extract_resume_skill_phrases(resume_text)[: settings.ats_max_skill_phrases]
    if not phrases:
        logger.warning("Semantic matching skipped: no skill phrases extracted from resume")
        return results, SemanticMetrics(keywords_processed=processed)

    keywords = [results[i].keyword.term for i in missing_idx]
    (phrase_vectors, phrase_failures), (keyword_vectors, keyword_failures) = await asyncio.gather(
        _embed_all(provider, phrases),
        _embed_all(provider, keywords),
    )
    attempts = len(phrases) + len(keywords)
    failures = phrase_failures + keyword_failures
    if failures:
        logger.warning("Semantic matching: %d/%d embeddings failed", failures, attempts)

    valid_phrases = [(p, v) for p, v in zip(phrases, phrase_vectors) if v is not None]
    valid_keywords = [(i, v) for i, v in zip(missing_idx, keyword_vectors) if v is not None]
    if not valid_phrases or not valid_keywords:
        logger.warning("Semantic matching degraded to lexical results: no usable embeddings")
        return results, SemanticMetrics(
            keywords_processed=processed,
            embedding_attempts=attempts,
            embedding_failures=failures,
        )

    try:
        matrix = cosine_similarity(
            np.asarray([v for _, v in valid_keywords], dtype=float),
            np.asarray([v for _, v in valid_phrases], dtype=float),
        )
    except ValueError as e:
        # inconsistent vector sizes from the provider
        logger.warning("Semantic matching degraded to lexical results: %s", e)
        return results, SemanticMetrics(
            keywords_processed=processed,
            embedding_attempts=attempts,
            embedding_failures=failures,
        )

    enhanced = list(results)
    upgraded = 0
    for row, (index, _) in enumerate(valid_keywords):
        best = int(np.argmax(matrix[row]))
        similarity = float(matrix[row][best])
        phrase = valid_phrases[best][0]
        result = results[index]

        if similarity >= settings.ats_semantic_threshold:
            enhanced[index] = result.model_copy(update={
                "status": "semantic",
                "score": settings.ats_semantic_score,
                "matched_term": f"{phrase} ≈ {result.keyword.term}",
            })
            upgraded += 1
        elif similarity >= settings.ats_partial_threshold:
            enhanced[index] = result.model_copy(update={
                "status": "partial",
                "score": settings.ats_partial_score,
                "matched_term": f"{phrase} (partial match)",
            })
            upgraded += 1

    metrics = SemanticMetrics(
        keywords_processed=processed,
        keywords_upgraded=upgraded,
        upgrade_ratio=upgraded / processed,
        embedding_attempts=attempts,
        embedding_failures=failures,
    )
    logger.info(
        "Semantic matching: %d/%d keywords upgraded (%.1f%%)",
        upgraded, processed, metrics.upgrade_ratio * 100,
    )
    return enhanced, metrics
