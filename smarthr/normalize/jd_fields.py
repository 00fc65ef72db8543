from __future__ import annotations

import re

from .profile_analyzer import TECH_VOCABULARY
from .utils import (
    ExtractionRule,
    clip,
    contains_term,
    first_match,
    is_bullet_like,
    is_named_section,
    normalize_line,
    strip_bullet_prefix,
)

TITLE_CHARS = (5, 100)
MAX_SKILLS_CHARS = 400
SKILL_SECTION_MAX_LINES = 8

DEFAULT_TITLE = "Not specified"
DEFAULT_SKILLS = "Skills not specified in job description"
DEFAULT_EXPERIENCE = "Experience requirement not specified"
DEFAULT_COMPANY = "Our Company"
FRESHER_EXPERIENCE = "Entry-level (freshers welcome)"

KNOWN_TITLES: tuple[str, ...] = (
    "Senior Software Engineer",
    "Machine Learning Engineer",
    "Full Stack Developer",
    "Software Development Engineer",
    "Software Engineer",
    "Backend Developer",
    "Frontend Developer",
    "DevOps Engineer",
    "Cloud Engineer",
    "Data Scientist",
    "Data Engineer",
    "Data Analyst",
    "QA Engineer",
    "Product Manager",
    "Business Analyst",
)

KNOWN_COMPANIES: tuple[str, ...] = (
    "Amazon",
    "Google",
    "Microsoft",
    "IBM",
    "Accenture",
    "Deloitte",
    "Infosys",
    "Tata Consultancy Services",
    "TCS",
    "Wipro",
    "Capgemini",
    "Cognizant",
)

_ROLE_SUFFIXES = (
    "Engineer",
    "Developer",
    "Manager",
    "Analyst",
    "Scientist",
    "Designer",
    "Architect",
    "Consultant",
    "Specialist",
    "Administrator",
)

_LABELED_TITLE_RE = re.compile(r"(?:job\s+title|position|role|designation)\s*[:\-]\s*([^\n]+)", re.IGNORECASE)
_LOOKING_FOR_RE = re.compile(
    r"we\s+are\s+(?:looking\s+for|hiring|seeking)\s+(?:an?\s+|the\s+)?([^\n.,]+)",
    re.IGNORECASE,
)
_TRAILING_CLAUSE_RE = re.compile(r"\s+(?:to|who|with|that|for|in)\s+.*$", re.IGNORECASE)
_ROLE_SUFFIX_RE = re.compile(
    rf"\b((?:[A-Z][A-Za-z+#./-]*\s+){{0,4}}(?:{'|'.join(_ROLE_SUFFIXES)}))\b"
)
_SKILLS_HEADER_RE = re.compile(
    r"^(?:required\s+skills|skills\s+required|technical\s+skills|key\s+skills|must\s+have|skills|"
    r"requirements|qualifications)\s*(?:[:\-]\s*(.*))?$",
    re.IGNORECASE,
)
_SKILL_ANCHOR_RE = re.compile(
    r"(?:experience\s+(?:with|in)|proficiency\s+(?:with|in)|proficient\s+in|knowledge\s+of|familiarity\s+with|"
    r"hands-on\s+experience\s+(?:with|in)|expertise\s+in)\s+([^\n.;]+)",
    re.IGNORECASE,
)
_EXPERIENCE_PATTERNS = (
    re.compile(r"\b(\d{1,2}\s*(?:-|to|–)\s*\d{1,2}\s*(?:years?|yrs?))", re.IGNORECASE),
    re.compile(r"\b(\d{1,2}\+?\s*(?:years?|yrs?))(?:\s+of)?(?:\s+\w+){0,3}?\s+experience", re.IGNORECASE),
    re.compile(r"\b((?:minimum|at\s+least|min\.?)\s+(?:of\s+)?\d{1,2}\+?\s*(?:years?|yrs?))", re.IGNORECASE),
    re.compile(r"experience\s*[:\-]\s*(\d{1,2}\+?\s*(?:-\s*\d{1,2}\s*)?(?:years?|yrs?))", re.IGNORECASE),
)
_FRESHER_RE = re.compile(r"\b(?:freshers?|entry[-\s]level|recent\s+graduates?|no\s+(?:prior\s+)?experience\s+required)\b", re.IGNORECASE)
_LABELED_COMPANY_RE = re.compile(r"(?:company(?:\s+name)?|organi[sz]ation|employer)\s*[:\-]\s*([^\n]+)", re.IGNORECASE)


def _plausible_title(value: str | None) -> str | None:
    if not value:
        return None
    cleaned = normalize_line(value).strip(" -:,")
    low, high = TITLE_CHARS
    return cleaned if low <= len(cleaned) <= high else None


def _title_known(text: str) -> str | None:
    for title in KNOWN_TITLES:
        if contains_term(text, title):
            return title
    return None


def _title_labeled(text: str) -> str | None:
    match = _LABELED_TITLE_RE.search(text)
    return _plausible_title(match.group(1)) if match else None


def _title_looking_for(text: str) -> str | None:
    match = _LOOKING_FOR_RE.search(text)
    if not match:
        return None
    return _plausible_title(_TRAILING_CLAUSE_RE.sub("", match.group(1)))


def _title_role_suffix(text: str) -> str | None:
    for match in _ROLE_SUFFIX_RE.finditer(text):
        title = _plausible_title(match.group(1))
        if title and " " in title:
            return title
    return None


TITLE_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("known_title", _title_known),
    ExtractionRule("labeled", _title_labeled),
    ExtractionRule("looking_for", _title_looking_for),
    ExtractionRule("role_suffix", _title_role_suffix),
)


def _skills_labeled_section(text: str) -> str | None:
    lines = text.splitlines()
    for index, raw_line in enumerate(lines):
        line = strip_bullet_prefix(normalize_line(raw_line))
        match = _SKILLS_HEADER_RE.match(line)
        if not match:
            continue
        collected: list[str] = []
        inline = (match.group(1) or "").strip()
        if inline:
            collected.append(inline)
        for follow in lines[index + 1 : index + 1 + SKILL_SECTION_MAX_LINES]:
            stripped = normalize_line(follow)
            if not stripped:
                if collected:
                    break
                continue
            # Item lists are often short all-caps tokens (SQL, AWS), so only
            # named or colon-terminated headings end the section.
            if is_named_section(stripped) or stripped.endswith(":"):
                break
            if inline and not is_bullet_like(stripped):
                break
            collected.append(strip_bullet_prefix(stripped))
        if collected:
            return ", ".join(item.rstrip(".;,") for item in collected if item)
    return None


def _skills_anchor_phrases(text: str) -> str | None:
    phrases = [normalize_line(match.group(1)).strip(" ,") for match in _SKILL_ANCHOR_RE.finditer(text)]
    phrases = [phrase for phrase in phrases if len(phrase) >= 3]
    return ", ".join(dict.fromkeys(phrases)) if phrases else None


def _skills_vocabulary(text: str) -> str | None:
    found = [term for term in TECH_VOCABULARY if contains_term(text, term)]
    return ", ".join(found) if found else None


SKILL_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("labeled_section", _skills_labeled_section),
    ExtractionRule("anchor_phrases", _skills_anchor_phrases),
    ExtractionRule("vocabulary", _skills_vocabulary),
)


def _experience_years(text: str) -> str | None:
    for pattern in _EXPERIENCE_PATTERNS:
        match = pattern.search(text)
        if match:
            return normalize_line(match.group(1))
    return None


def _experience_fresher(text: str) -> str | None:
    return FRESHER_EXPERIENCE if _FRESHER_RE.search(text) else None


EXPERIENCE_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("numeric_years", _experience_years),
    ExtractionRule("fresher", _experience_fresher),
)


def _company_known(text: str) -> str | None:
    for company in KNOWN_COMPANIES:
        if re.search(rf"\b{re.escape(company)}\b", text):
            return company
    return None


def _company_labeled(text: str) -> str | None:
    match = _LABELED_COMPANY_RE.search(text)
    if not match:
        return None
    value = normalize_line(match.group(1)).strip(" -:,")
    return value[:100] if value else None


COMPANY_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("known_company", _company_known),
    ExtractionRule("labeled", _company_labeled),
)


def extract_job_title(text: str) -> str:
    hit = first_match(TITLE_RULES, text)
    return hit[1] if hit else DEFAULT_TITLE


def extract_required_skills(text: str) -> str:
    hit = first_match(SKILL_RULES, text)
    return clip(hit[1], MAX_SKILLS_CHARS) if hit else DEFAULT_SKILLS


def extract_experience_requirement(text: str) -> str:
    hit = first_match(EXPERIENCE_RULES, text)
    return hit[1] if hit else DEFAULT_EXPERIENCE


def extract_company(text: str) -> str:
    hit = first_match(COMPANY_RULES, text)
    return hit[1] if hit else DEFAULT_COMPANY
