from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable

_BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_BULLET_PATTERN = re.compile(rf"^\s*(?:[{re.escape(_BULLET_CHARS)}]|(?:\d+[\.\)]))\s+")
_SECTION_RE = re.compile(
    r"^\s*(summary|objective|profile|experience|work experience|employment history|skills|technical skills|"
    r"education|projects|certifications|responsibilities|requirements|qualifications|benefits|about us)\s*:?\s*$",
    re.IGNORECASE,
)

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


@dataclass(frozen=True)
class ExtractionRule:
    """A named, pure text -> optional value extractor."""

    name: str
    extract: Callable[[str], str | None]


def first_match(rules: Iterable[ExtractionRule], text: str) -> tuple[str, str] | None:
    for rule in rules:
        value = rule.extract(text)
        if value:
            return rule.name, value
    return None


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line).strip()


def is_bullet_like(line: str) -> bool:
    return bool(_BULLET_PATTERN.match(line))


def strip_bullet_prefix(line: str) -> str:
    return _BULLET_PATTERN.sub("", line).strip()


def contains_term(text: str, term: str) -> bool:
    pattern = rf"(?<![a-z0-9]){re.escape(term.lower())}(?![a-z0-9])"
    return re.search(pattern, text.lower()) is not None


def contains_any_term(text: str, terms: Iterable[str]) -> bool:
    return any(contains_term(text, term) for term in terms)


def is_named_section(line: str) -> bool:
    return bool(_SECTION_RE.match(normalize_line(line)))


def clip(text: str, max_chars: int) -> str:
    cleaned = (text or "").strip()
    if len(cleaned) <= max_chars:
        return cleaned
    return cleaned[:max_chars].rstrip()
