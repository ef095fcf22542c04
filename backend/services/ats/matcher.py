"""Deterministic ATS keyword matching.

Precedence per keyword (first hit wins):
    1. years-of-experience requirement  → semantic, 1.0
    2. degree requirement (same tier)   → semantic, 1.0
    3. keyword variant, word boundary   → exact, 1.0
    4. JD synonym variant               → semantic, 1.0
    5. keyword variant as substring     → partial, 0.5
    6. otherwise                        → missing, 0.0
"""

import re

from models.schemas.ats import JdKeyword, KeywordMatchResult
from services.keyword_variants import variants_of

_UNICODE_HYPHENS_RE = re.compile(r"[\u2010-\u2015]")

# Variants shorter than this never count as substring hits ("c", "r", "go")
MIN_PARTIAL_LENGTH = 3

_KEYWORD_YEARS_RE = re.compile(r"(\d+)\+?\s*(?:-\s*\d+)?\s*years?", re.IGNORECASE)
_RESUME_YEARS_RE = re.compile(
    r"(?:\bover\s+|\bmore than\s+|\b)(\d+)\+?\s*(?:-\s*\d+)?\s*years?", re.IGNORECASE
)

# Bare "bs"/"ms" in a keyword is a degree only at the end or before in/of/degree
# ("MS Excel", "MS SQL Server" are tools)
_BARE_DEGREE_TAIL = r"(?=\s*(?:$|(?:in|of|degree)\b))"

# (tier, keyword check, resume patterns); checked in order, all tiers tried
DEGREE_TIERS: list[tuple[str, re.Pattern, list[re.Pattern]]] = [
    (
        "bachelor",
        re.compile(rf"bachelor|undergrad|\bbsc\b|\bbba\b|(?<![a-z])b\.[sa]\.?(?![a-z])|\bb[sa]\b{_BARE_DEGREE_TAIL}"),
        [
            re.compile(p) for p in (
                r"bachelor'?s?(?:\s+(?:of\s+)?(?:science|arts|business|engineering|technology))?",
                r"(?<![a-z])b\.[sa]\.?(?![a-z])",
                r"\bb[sa]\b",
                r"\bbsc\b",
                r"\bbba\b",
                r"undergraduate\s*degree",
                r"4[\s-]?year\s*degree",
                r"university\s*degree",
            )
        ],
    ),
    (
        "master",
        re.compile(
            r"master'?s\b|master\s+(?:of|degree)\b|(?<!under)graduate\s*degree"
            rf"|\bmba\b|\bmsc\b|(?<![a-z])m\.[sa]\.?(?![a-z])|\bm[sa]\b{_BARE_DEGREE_TAIL}"
        ),
        [
            re.compile(p) for p in (
                r"master'?s\b",
                r"master\s+of\s+(?:science|arts|business|engineering|technology)",
                r"(?<![a-z])m\.[sa]\.?(?![a-z])",
                r"\bm[sa]\s+(?:in|of)\b",
                r"\bmsc\b",
                r"\bmba\b",
                r"(?<!under)graduate\s*degree",
            )
        ],
    ),
    (
        "doctorate",
        re.compile(r"ph\.?\s?d|doctorate|doctoral"),
        [
            re.compile(p) for p in (
                r"ph\.?\s?d\.?",
                r"doctorate",
                r"doctoral\s*degree",
                r"doctor\s+of\s+philosophy",
            )
        ],
    ),
    (
        "associate",
        re.compile(r"associate'?s?\s+(?:degree|of)\b|(?<![a-z])a\.[as]\.?(?![a-z])|2[\s-]?year\s*degree"),
        [
            re.compile(p) for p in (
                r"associate'?s?\s+(?:degree|of\s+(?:science|arts|applied))",
                r"(?<![a-z])a\.[as]\.?(?![a-z])",
                r"2[\s-]?year\s*degree",
            )
        ],
    ),
]


def normalize_resume_text(text: str) -> str:
    return _UNICODE_HYPHENS_RE.sub("-", (text or "").lower()).replace("\u2019", "'")


def check_years_of_experience(keyword: str, resume_text: str) -> int | None:
    """Largest year count in the resume if it satisfies the keyword's requirement.

    Returns None when the keyword is not a years requirement or the resume
    falls short.
    """
    required = _KEYWORD_YEARS_RE.search(keyword.lower())
    if not required:
        return None
    found = [int(m.group(1)) for m in _RESUME_YEARS_RE.finditer(resume_text)]
    if found and max(found) >= int(required.group(1)):
        return max(found)
    return None


def check_education_requirement(keyword: str, resume_text: str) -> str | None:
    """Matched resume phrase when the resume holds a degree of the keyword's tier."""
    keyword = normalize_resume_text(keyword)
    for _tier, check, patterns in DEGREE_TIERS:
        if not check.search(keyword):
            continue
        for pattern in patterns:
            match = pattern.search(resume_text)
            if match:
                return match.group(0).strip()
    return None


def _word_match(variant: str, text: str) -> bool:
    return re.search(rf"\b{re.escape(variant)}\b", text) is not None


def match_keyword(keyword: JdKeyword, resume_text: str) -> KeywordMatchResult:
    """Match one keyword against already-normalized resume text."""
    years = check_years_of_experience(keyword.term, resume_text)
    if years is not None:
        return KeywordMatchResult(
            keyword=keyword, status="semantic", score=1.0, matched_term=f"{years}+ years"
        )

    degree = check_education_requirement(keyword.term, resume_text)
    if degree:
        return KeywordMatchResult(keyword=keyword, status="semantic", score=1.0, matched_term=degree)

    term_variants = sorted(variants_of(keyword.term))
    for variant in term_variants:
        if _word_match(variant, resume_text):
            return KeywordMatchResult(keyword=keyword, status="exact", score=1.0, matched_term=keyword.term)

    for synonym in keyword.variants:
        for form in sorted(variants_of(synonym)):
            if _word_match(form, resume_text):
                return KeywordMatchResult(keyword=keyword, status="semantic", score=1.0, matched_term=synonym)

    for variant in term_variants:
        if len(variant) >= MIN_PARTIAL_LENGTH and variant in resume_text:
            return KeywordMatchResult(keyword=keyword, status="partial", score=0.5, matched_term=keyword.term)

    return KeywordMatchResult(keyword=keyword)


def match_keywords(resume_text: str, keywords: list[JdKeyword]) -> list[KeywordMatchResult]:
    """One result per keyword, in input order."""
    normalized = normalize_resume_text(resume_text)
    return [match_keyword(keyword, normalized) for keyword in keywords]
