"""Lexical variant generation for robust keyword matching.

Handles unicode hyphens, hyphen/space swaps and naive singular/plural so
that "data-driven" matches "data driven" and "skill" matches "skills".
"""

import re

_UNICODE_HYPHENS_RE = re.compile(r"[\u2010-\u2015]")
_NON_WORD_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_term(term: str) -> str:
    """Lowercase, ASCII hyphens, drop punctuation, collapse whitespace."""
    text = _UNICODE_HYPHENS_RE.sub("-", (term or "").lower())
    text = _NON_WORD_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def variants_of(term: str) -> set[str]:
    """All lexical forms of `term` worth matching. Empty input gives an empty set."""
    base = normalize_term(term)
    if not base:
        return set()

    variants = {base}
    if "-" in base:
        variants.add(base.replace("-", " "))
    if " " in base:
        variants.add(base.replace(" ", "-"))

    # naive singular/plural, skips "ss" endings like "process"
    if len(base) > 3 and base.endswith("s") and not base.endswith("ss"):
        variants.add(base[:-1])
    if len(base) > 2 and not base.endswith("s"):
        variants.add(base + "s")

    return {v for v in variants if v}
