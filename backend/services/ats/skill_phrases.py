"""Skill-like phrase extraction from rendered resume text.

Feeds the semantic upgrade pass: the phrases are embedded and compared
against job keywords that lexical matching missed.
"""

import re

_SECTION_PATTERNS: list[re.Pattern] = [
    re.compile(
        r"(?:skills|competencies|expertise|technologies|tools|proficiencies)[:\s]*"
        r"([^\n]+(?:\n(?![a-z]+:)[^\n]+)*)"
    ),
    re.compile(r"(?:technical|core|key|professional)\s+(?:skills|competencies)[:\s]*([^\n]+)"),
    re.compile(r"(?:areas of expertise|technical proficiencies)[:\s]*([^\n]+)"),
]
_SECTION_SPLIT_RE = re.compile(r"[,|\u2022\u00b7;\n]+")

_TECH_TERMS_RE = re.compile(
    r"\b(?:python|javascript|typescript|java|sql|react|node\.?js|aws|docker|kubernetes|git"
    r"|excel|tableau|looker|grafana|jira|confluence|salesforce|slack|figma|photoshop"
    r"|sketch|power\s*bi|google\s*analytics)\b",
    re.IGNORECASE,
)
_ACRONYM_RE = re.compile(r"\b[A-Z]{2,}\b")
_PROPER_NOUN_RE = re.compile(r"\b[A-Z][a-z]+(?:\.[A-Z][a-z]+)*\b")

_ACTION_PHRASE_RE = re.compile(
    r"(?:led|managed|developed|built|created|implemented|designed|analyzed|optimized"
    r"|reduced|increased|improved|collaborated|coordinated|executed|delivered"
    r"|spearheaded|drove|launched|established)\s+[^.!?\n]{10,60}"
)
_ACTION_CORE_RE = re.compile(r"^(\w+\s+\w+(?:\s+\w+)?)")

_DOMAIN_TERMS_RE = re.compile(
    r"\b(?:machine learning|data analysis|data visualization|project management"
    r"|cross[- ]functional|stakeholder management|content moderation|fraud detection"
    r"|fraud prevention|fraud risk|risk management|process improvement|automation"
    r"|leadership|communication|problem[- ]solving|analytical skills|technical skills"
    r"|digital payments|credit card|data engineering|data science|business intelligence"
    r"|agile|scrum|kanban|devops|ci/cd|cloud computing)\b"
)

MAX_PHRASE_LENGTH = 50
MAX_TOKEN_LENGTH = 30


def extract_resume_skill_phrases(resume_text: str) -> list[str]:
    """Ordered, deduped, lowercased skill phrases; most specific sources first."""
    if not resume_text or not resume_text.strip():
        return []
    lowered = resume_text.lower()
    phrases: list[str] = []

    # 1. Skill-ish sections
    for pattern in _SECTION_PATTERNS:
        for match in pattern.finditer(lowered):
            for item in _SECTION_SPLIT_RE.split(match.group(1) or ""):
                item = item.strip()
                if 1 < len(item) < MAX_PHRASE_LENGTH:
                    phrases.append(item)

    # 2. Tool and technology mentions
    for pattern in (_TECH_TERMS_RE, _ACRONYM_RE):
        for match in pattern.finditer(resume_text):
            token = match.group(0)
            if 1 < len(token) < MAX_TOKEN_LENGTH:
                phrases.append(token.lower())

    # 3. Domain vocabulary
    phrases.extend(match.group(0) for match in _DOMAIN_TERMS_RE.finditer(lowered))

    # 4. Action verb + object from bullets
    for match in _ACTION_PHRASE_RE.finditer(lowered):
        core = _ACTION_CORE_RE.match(match.group(0))
        if core:
            phrases.append(core.group(1))

    # 5. Capitalized words, least specific
    for match in _PROPER_NOUN_RE.finditer(resume_text):
        token = match.group(0)
        if 1 < len(token) < MAX_TOKEN_LENGTH:
            phrases.append(token.lower())

    return [p for p in dict.fromkeys(phrases) if len(p) >= 2]
