from __future__ import annotations

import re
import time
from typing import Callable

from smarthr.schemas import CandidateProfile

from .utils import EMAIL_RE, ExtractionRule, first_match, normalize_line

NAME_SCAN_LINES = 10
DEFAULT_NAME = "Unknown"
DEFAULT_PHONE = "Not provided"
PLACEHOLDER_EMAIL_PREFIX = "anonymous"
PLACEHOLDER_EMAIL_DOMAIN = "example.com"

_NAME_WORD = r"[A-Z][a-zA-Z'\-]+"
_PROPER_CASE_RE = re.compile(rf"^({_NAME_WORD}(?:\s+(?:[A-Z]\.\s*)?{_NAME_WORD})+)$")
_ALL_CAPS_RE = re.compile(r"^([A-Z][A-Z\s.'\-]{3,38}[A-Z])$")
_HONORIFIC_RE = re.compile(rf"^(?:Mr|Mrs|Ms|Miss|Dr|Prof)\.?\s+({_NAME_WORD}(?:\s+{_NAME_WORD})*)$")
_LABELED_NAME_RE = re.compile(r"^(?:full\s+)?name\s*[:\-]\s*([A-Za-z][A-Za-z.'\-\s]{1,60})$", re.IGNORECASE)

_INTERNATIONAL_PHONE_RE = re.compile(r"\+\d{1,3}[\s.-]?\(?\d{1,4}\)?(?:[\s.-]?\d{2,5}){2,4}")
_TEN_DIGIT_PHONE_RE = re.compile(r"(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
_GENERIC_PHONE_RE = re.compile(r"\(?\d{2,5}\)?(?:[\s.-]\d{2,5}){2,4}")


def _is_name_candidate_line(line: str) -> bool:
    lowered = line.lower()
    return "@" not in line and "http" not in lowered and not any(ch.isdigit() for ch in line)


def _name_proper_case(line: str) -> str | None:
    match = _PROPER_CASE_RE.match(line)
    return match.group(1) if match else None


def _name_all_caps(line: str) -> str | None:
    match = _ALL_CAPS_RE.match(line)
    if not match:
        return None
    value = normalize_line(match.group(1))
    if len(value) < 5 or len(value) > 40 or " " not in value:
        return None
    return value


def _name_with_honorific(line: str) -> str | None:
    match = _HONORIFIC_RE.match(line)
    return match.group(1) if match else None


def _name_labeled(line: str) -> str | None:
    match = _LABELED_NAME_RE.match(line)
    return normalize_line(match.group(1)) if match else None


NAME_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("proper_case", _name_proper_case),
    ExtractionRule("all_caps", _name_all_caps),
    ExtractionRule("honorific", _name_with_honorific),
    ExtractionRule("labeled", _name_labeled),
)


def _digit_count(value: str) -> int:
    return sum(1 for ch in value if ch.isdigit())


def _phone_rule(pattern: re.Pattern[str]) -> Callable[[str], str | None]:
    def extract(text: str) -> str | None:
        for match in pattern.finditer(text):
            value = match.group(0).strip()
            if 7 <= _digit_count(value) <= 15:
                return value
        return None

    return extract


PHONE_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("international", _phone_rule(_INTERNATIONAL_PHONE_RE)),
    ExtractionRule("ten_digit", _phone_rule(_TEN_DIGIT_PHONE_RE)),
    ExtractionRule("separated_groups", _phone_rule(_GENERIC_PHONE_RE)),
)


def extract_name(text: str) -> str:
    lines = [normalize_line(line) for line in (text or "").splitlines()]
    lines = [line for line in lines if line][:NAME_SCAN_LINES]
    for line in lines:
        if not _is_name_candidate_line(line):
            continue
        hit = first_match(NAME_RULES, line)
        if hit:
            return hit[1]
    return DEFAULT_NAME


def placeholder_email(clock: Callable[[], float] = time.time) -> str:
    return f"{PLACEHOLDER_EMAIL_PREFIX}-{int(clock() * 1000)}@{PLACEHOLDER_EMAIL_DOMAIN}"


def extract_email(text: str, clock: Callable[[], float] = time.time) -> str:
    match = EMAIL_RE.search(text or "")
    if match:
        return match.group(0)
    return placeholder_email(clock)


def extract_phone(text: str) -> str:
    # Emails can carry digit runs that look like phone groups.
    scrubbed = EMAIL_RE.sub(" ", text or "")
    hit = first_match(PHONE_RULES, scrubbed)
    return hit[1] if hit else DEFAULT_PHONE


def extract_candidate_fields(text: str, clock: Callable[[], float] = time.time) -> CandidateProfile:
    return CandidateProfile(
        name=extract_name(text),
        email=extract_email(text, clock),
        phone=extract_phone(text),
    )
