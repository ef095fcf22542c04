"""Job keyword set used by the experience keyword score."""

import re

from config import settings
from models.schemas.job import ParsedJobDescription, TargetJobContext

_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9+#/]+")
_NON_ALPHA_RE = re.compile(r"[^a-z\s]")

# Common ATS-relevant phrases worth matching verbatim
ATS_PHRASE_PATTERNS: list[re.Pattern] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\b(?:cross[- ]functional|data[- ]driven|client[- ]facing|detail[- ]oriented|self[- ]starter)\b",
        r"\b(?:process improvement|stakeholder management|project management|risk management)\b",
        r"\b(?:problem solving|analytical skills|communication skills|organizational skills)\b",
        r"\b(?:high[- ]growth|fast[- ]paced|team collaboration|time management)\b",
        r"\b(?:financial services|billing systems|contract management|account management)\b",
        r"\b(?:attention to detail|customer success|business operations|technical support)\b",
    )
]


def tokenize(text: str, min_length: int = 4) -> list[str]:
    return [t for t in _TOKEN_SPLIT_RE.split((text or "").lower()) if len(t) >= min_length]


def extract_key_phrases(text: str) -> list[str]:
    """Dictionary phrases plus alphabetic bigrams (>= 6 chars) from raw JD text."""
    phrases: list[str] = []
    for pattern in ATS_PHRASE_PATTERNS:
        phrases.extend(match.group(0).lower() for match in pattern.finditer(text))

    words = text.lower().split()
    for first, second in zip(words, words[1:]):
        bigram = _NON_ALPHA_RE.sub("", f"{first} {second}").strip()
        if len(bigram) >= 6:
            phrases.append(bigram)

    return list(dict.fromkeys(phrases))


def build_job_keywords(
    job: TargetJobContext,
    parsed_job: ParsedJobDescription,
    limit: int | None = None,
) -> list[str]:
    """Ordered, deduped, lowercased keywords, most specific sources first."""
    limit = settings.job_keyword_limit if limit is None else limit
    keywords: list[str] = []
    seen: set[str] = set()

    def add(keyword: str) -> None:
        normalized = keyword.lower().strip()
        if len(normalized) >= 2 and normalized not in seen:
            seen.add(normalized)
            keywords.append(normalized)

    for skill in parsed_job.hard_skills:
        add(skill)
    for skill in parsed_job.soft_skills:
        add(skill)
    for phrase in parsed_job.key_phrases:
        add(phrase)
    for responsibility in parsed_job.responsibilities:
        add(responsibility)
        for token in tokenize(responsibility):
            add(token)
    if job.title:
        for token in tokenize(job.title):
            add(token)
    for token in tokenize(parsed_job.normalized_title):
        add(token)
    for skill in job.required_skills:
        add(skill)
    if job.description:
        for phrase in extract_key_phrases(job.description):
            add(phrase)

    return keywords[:limit]
