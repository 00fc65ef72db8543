from __future__ import annotations

import re

from smarthr.schemas import AnalyzedProfile, CareerLevel, EducationTier

from .utils import contains_any_term, contains_term, normalize_line

MAX_PROJECTS = 3
MAX_ACHIEVEMENTS = 2
PROJECT_PHRASE_CHARS = (10, 150)
ACHIEVEMENT_PHRASE_CHARS = (10, 100)

DEFAULT_PROJECTS = "various technical projects"
DEFAULT_ACHIEVEMENTS = "professional accomplishments"
DEFAULT_INTERESTS = "technology and software development"
DEFAULT_INDUSTRY = "Technology"

LEADERSHIP_TEXT = "Demonstrated leadership and team management experience"
NO_LEADERSHIP_TEXT = "Individual contributor with collaborative team experience"

TECH_VOCABULARY: tuple[str, ...] = (
    "python",
    "java",
    "javascript",
    "typescript",
    "react",
    "angular",
    "node.js",
    "django",
    "flask",
    "spring",
    "sql",
    "mongodb",
    "aws",
    "azure",
    "gcp",
    "docker",
    "kubernetes",
    "machine learning",
    "data science",
    "artificial intelligence",
    "devops",
    "microservices",
    "html",
    "css",
    "git",
    "tensorflow",
)

INDUSTRY_VOCABULARY: tuple[str, ...] = (
    "Healthcare",
    "Fintech",
    "Finance",
    "Banking",
    "Insurance",
    "E-commerce",
    "Retail",
    "Education",
    "Telecommunications",
    "Automotive",
    "Manufacturing",
    "Logistics",
    "Gaming",
    "Media",
    "Consulting",
)

LEADERSHIP_KEYWORDS = (
    "lead",
    "led",
    "leading",
    "leadership",
    "manage",
    "managed",
    "managing",
    "manager",
    "mentor",
    "mentored",
    "mentoring",
    "supervised",
    "supervisor",
    "head of",
    "coordinated",
    "spearheaded",
)
SENIOR_KEYWORDS = ("senior", "lead", "principal", "architect", "staff engineer", "head of")
JUNIOR_KEYWORDS = ("junior", "intern", "internship", "fresher", "graduate", "entry level", "entry-level", "trainee")
ADVANCED_DEGREE_KEYWORDS = (
    "phd",
    "ph.d",
    "doctorate",
    "masters",
    "master's",
    "master of",
    "m.tech",
    "msc",
    "m.sc",
    "m.s",
    "mba",
)
DEGREE_KEYWORDS = (
    "bachelor",
    "bachelors",
    "bachelor's",
    "b.tech",
    "b.e",
    "bsc",
    "b.sc",
    "b.s",
    "degree",
    "university",
    "college",
    "graduated",
)

_PROJECT_RE = re.compile(
    r"\b(?:projects?|built|developed|created|designed|implemented)\b\s*[:\-]?\s*([^\n.;]+)",
    re.IGNORECASE,
)
_ACHIEVEMENT_RE = re.compile(
    r"\b(?:achieved|achievements?|awards?|awarded|won|recogni[sz]ed|certified|honou?red)\b\s*[:\-]?\s*([^\n.;]+)",
    re.IGNORECASE,
)
_YEARS_EXPERIENCE_RE = re.compile(r"(\d{1,2})\+?\s*(?:years?|yrs?)(?:\s+of)?(?:\s+\w+){0,2}?\s+(?:experience|exp)\b", re.IGNORECASE)
_YEAR_MENTION_RE = re.compile(r"\b(?:19|20)\d{2}\b")


def _phrases(pattern: re.Pattern[str], text: str, bounds: tuple[int, int], limit: int) -> list[str]:
    low, high = bounds
    phrases: list[str] = []
    for match in pattern.finditer(text):
        phrase = normalize_line(match.group(1)).strip(" ,:-")
        if low <= len(phrase) <= high and phrase not in phrases:
            phrases.append(phrase)
        if len(phrases) >= limit:
            break
    return phrases


def extract_projects(text: str) -> str:
    found = _phrases(_PROJECT_RE, text, PROJECT_PHRASE_CHARS, MAX_PROJECTS)
    return ", ".join(found) if found else DEFAULT_PROJECTS


def extract_achievements(text: str) -> str:
    found = _phrases(_ACHIEVEMENT_RE, text, ACHIEVEMENT_PHRASE_CHARS, MAX_ACHIEVEMENTS)
    return ", ".join(found) if found else DEFAULT_ACHIEVEMENTS


def extract_technical_skills(text: str) -> list[str]:
    return [term for term in TECH_VOCABULARY if contains_term(text, term)]


def classify_career_level(text: str) -> CareerLevel:
    match = _YEARS_EXPERIENCE_RE.search(text)
    if match:
        years = int(match.group(1))
        if years > 7:
            return "Senior"
        if years > 3:
            return "Mid-level"
        return "Entry-level"
    if contains_any_term(text, SENIOR_KEYWORDS):
        return "Senior"
    if contains_any_term(text, JUNIOR_KEYWORDS):
        return "Entry-level"
    if len(_YEAR_MENTION_RE.findall(text)) > 4:
        return "Experienced"
    return "Mid-level"


def classify_industry(text: str) -> str:
    for industry in INDUSTRY_VOCABULARY:
        if contains_term(text, industry):
            return industry
    return DEFAULT_INDUSTRY


def has_leadership_signal(text: str) -> bool:
    return contains_any_term(text, LEADERSHIP_KEYWORDS)


def classify_education(text: str) -> EducationTier:
    if contains_any_term(text, ADVANCED_DEGREE_KEYWORDS):
        return "Advanced Degree"
    if contains_any_term(text, DEGREE_KEYWORDS):
        return "Bachelor's Degree"
    return "Technical Background"


def analyze_profile(text: str) -> AnalyzedProfile:
    text = text or ""
    skills = extract_technical_skills(text)
    leadership = has_leadership_signal(text)
    return AnalyzedProfile(
        projects=extract_projects(text),
        technical_skills=skills,
        interests=", ".join(skills) if skills else DEFAULT_INTERESTS,
        career_level=classify_career_level(text),
        industry=classify_industry(text),
        has_leadership=leadership,
        leadership=LEADERSHIP_TEXT if leadership else NO_LEADERSHIP_TEXT,
        education=classify_education(text),
        achievements=extract_achievements(text),
    )
