"""Experience record validation.

Drops experiences that cannot be placed on a resume (no title, no
timeline) and scrubs template placeholder text. Never raises for
data-quality problems; every decision is returned as issues + messages.
"""

import re
from dataclasses import dataclass, field
from typing import Literal

from models.schemas.profile import Bullet, Experience
from services.timeline import is_ongoing

ExperienceIssue = Literal[
    "missing_title",
    "missing_company",
    "missing_start_date",
    "missing_end_date",
    "placeholder_detected",
]

ISSUE_MESSAGES: dict[str, str] = {
    "missing_title": "Missing role title",
    "missing_company": "Missing company name",
    "missing_start_date": "Missing start date",
    "missing_end_date": "Missing end date or current-role flag",
    "placeholder_detected": "Contains placeholder text",
}

# Issues that remove an experience from selection entirely
BLOCKING_ISSUES = frozenset({"missing_title", "missing_start_date"})

PLACEHOLDER_EXACT = frozenset({
    "company name", "your company", "job title", "position title",
    "insert title", "insert company", "sample company", "sample title",
    "lorem ipsum", "placeholder", "city, state", "location",
    "mm/yyyy", "month year", "yyyy", "yyyy-yyyy", "20xx", "tbd", "n/a",
})

PLACEHOLDER_PATTERNS: list[re.Pattern] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\{\{.*?\}\}",
        r"\[\[.*?\]\]",
        r"<.*?>",
        r"\bxx+\b",
        r"\byy+\b",
        r"\bzz+\b",
        r"company\s+name",
        r"job\s+title",
        r"insert\s+(?:company|title|role)",
        r"sample\s+(?:company|title)",
        r"city,\s*state",
        r"mm/yyyy",
        r"month\s+year",
        r"\b20xx\b",
        r"\byyyy\b",
        r"\btbd\b",
        r"\bn/a\b",
        r"\benter\s+",
    )
]

# Bullet text is only checked for template markers, not field placeholders
BULLET_PLACEHOLDER_PATTERNS: list[re.Pattern] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\{\{.*?\}\}",
        r"\[\[.*?\]\]",
        r"lorem\s+ipsum",
        r"\bxx+\s*%",
    )
]


@dataclass
class ExperienceValidation:
    experience: Experience  # scrubbed copy
    index: int = 0  # position in the input list
    issues: list[str] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    had_placeholder: bool = False

    @property
    def is_eligible(self) -> bool:
        return not any(issue in BLOCKING_ISSUES for issue in self.issues)


@dataclass
class ValidationBatch:
    eligible: list[ExperienceValidation] = field(default_factory=list)
    filtered: list[ExperienceValidation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def scrub_field(value: str | None) -> tuple[str, bool]:
    """Return (clean_value, was_placeholder). Placeholders become ''."""
    if not value or not isinstance(value, str):
        return "", False
    trimmed = value.strip()
    if not trimmed:
        return "", False
    if is_ongoing(trimmed):
        return "Present", False
    if trimmed.lower() in PLACEHOLDER_EXACT:
        return "", True
    if any(pattern.search(trimmed) for pattern in PLACEHOLDER_PATTERNS):
        return "", True
    return trimmed, False


def scrub_bullet(text: str | None) -> tuple[str, bool]:
    """Like scrub_field, but only exact placeholders and template markers count."""
    if not text or not isinstance(text, str):
        return "", False
    trimmed = text.strip()
    if not trimmed:
        return "", False
    if trimmed.lower() in PLACEHOLDER_EXACT:
        return "", True
    if any(pattern.search(trimmed) for pattern in BULLET_PLACEHOLDER_PATTERNS):
        return "", True
    return trimmed, False


def validate_experience(experience: Experience, index: int = 0) -> ExperienceValidation:
    """Scrub one experience and report what is wrong with it."""
    title, title_ph = scrub_field(experience.title)
    company, company_ph = scrub_field(experience.company)
    location, location_ph = scrub_field(experience.location)
    start, start_ph = scrub_field(experience.start_date)
    end, end_ph = scrub_field(experience.end_date)

    bullets: list[Bullet] = []
    bullet_ph = False
    for bullet in experience.bullets:
        text, placeholder = scrub_bullet(bullet.text)
        bullet_ph = bullet_ph or placeholder
        if text:
            bullets.append(bullet if text == bullet.text else bullet.model_copy(update={"text": text}))

    is_current = experience.is_current
    if is_current and not end:
        end = "Present"

    issues: list[str] = []
    has_timeline = bool(start) or bool(end) or is_current
    if not title:
        issues.append("missing_title")
    if not company:
        issues.append("missing_company")
    if not has_timeline:
        issues.append("missing_start_date")

    # a start date with no end is an ongoing role
    if not end and start and not is_current:
        is_current = True
        end = "Present"
    if not end and not is_current:
        issues.append("missing_end_date")

    had_placeholder = any((title_ph, company_ph, location_ph, start_ph, end_ph, bullet_ph))
    if had_placeholder:
        issues.append("placeholder_detected")

    scrubbed = experience.model_copy(update={
        "title": title,
        "company": company,
        "location": location or None,
        "start_date": start or None,
        "end_date": end or None,
        "is_current": is_current,
        "bullets": bullets,
    })
    return ExperienceValidation(
        experience=scrubbed,
        index=index,
        issues=issues,
        messages=[ISSUE_MESSAGES[issue] for issue in issues],
        had_placeholder=had_placeholder,
    )


def experience_label(experience: Experience) -> str:
    return " @ ".join(part for part in (experience.title, experience.company) if part) or "Experience"


def filter_eligible_experiences(experiences: list[Experience]) -> ValidationBatch:
    """Split experiences into eligible and filtered, with removal warnings."""
    batch = ValidationBatch()
    for index, experience in enumerate(experiences):
        result = validate_experience(experience, index)
        if result.is_eligible:
            batch.eligible.append(result)
        else:
            batch.filtered.append(result)
            batch.warnings.append(
                f"{experience_label(result.experience)} removed: {', '.join(result.messages)}"
            )
    return batch
