from __future__ import annotations

import re

from smarthr.schemas.profile import AnalyzedProfile, JobDescriptionRecord, QuestionSet, TaskSet

DEFAULT_PRIMARY_SKILL = "Python"
DEFAULT_PRIMARY_TOOL = "AWS"

_SKILLS_LABEL_RE = re.compile(r"(?:Languages|Skills)[ \t]*:[ \t]*([^\n]+)", re.IGNORECASE)
_TOOLS_LABEL_RE = re.compile(r"Tools[ \t]*:[ \t]*([^\n]+)", re.IGNORECASE)

DEFAULT_TECHNICAL_QUESTION = "Describe your experience with the technologies mentioned in your resume."
DEFAULT_BEHAVIORAL_QUESTION = "Tell me about a challenging situation you faced and how you handled it."

BEHAVIORAL_TEMPLATES: tuple[str, ...] = (
    "Tell me about a time when you had to learn a new technology quickly. How did you approach it?",
    "How do you handle tight deadlines and pressure in your work?",
    "Describe a situation where you had to work with a difficult team member. How did you handle it?",
    "What motivates you in your career and what are your long-term goals?",
    "Tell me about a project you're particularly proud of and why.",
)


def _first_listed(pattern: re.Pattern[str], text: str, default: str) -> str:
    match = pattern.search(text or "")
    if not match:
        return default
    first = match.group(1).split(",")[0].strip()
    return first or default


def primary_skill(text: str) -> str:
    return _first_listed(_SKILLS_LABEL_RE, text, DEFAULT_PRIMARY_SKILL)


def primary_tool(text: str) -> str:
    return _first_listed(_TOOLS_LABEL_RE, text, DEFAULT_PRIMARY_TOOL)


def fallback_questions(extracted_text: str, name: str) -> QuestionSet:
    skill = primary_skill(extracted_text)
    tool = primary_tool(extracted_text)
    return QuestionSet(
        technical=[
            f"Explain your experience with {skill} and how you've used it in your projects.",
            "How would you optimize a SQL query for better performance in a large database?",
            "Describe a challenging technical problem you solved recently and your approach.",
            f"What {tool} services have you worked with and how did you use them?",
            "How do you ensure code quality and maintainability in your projects?",
        ],
        behavioral=list(BEHAVIORAL_TEMPLATES),
    )


def fallback_questions_for_jd(
    extracted_text: str,
    name: str,
    jd: JobDescriptionRecord,
    profile: AnalyzedProfile,
) -> QuestionSet:
    skill = primary_skill(extracted_text)
    required = jd.required_skills.split(",")[0].strip() or skill
    return QuestionSet(
        technical=[
            f"The {jd.job_title} role calls for {required}. Walk us through how you have applied it in a real project.",
            f"Explain your experience with {skill} and how it prepares you for this position.",
            f"Given the requirement of {jd.experience_required}, which past project best demonstrates your readiness?",
            f"How would you design and ship a production feature using {primary_tool(extracted_text)}?",
            "How do you ensure code quality and maintainability on a team codebase?",
        ],
        behavioral=[
            f"Why are you interested in joining {jd.company} as a {jd.job_title}?",
            f"Your background is in {profile.industry}. How would you ramp up on a new domain quickly?",
            "Describe a situation where you had to work with a difficult team member. How did you handle it?",
            "How do you handle tight deadlines and pressure in your work?",
            "Tell me about a project you're particularly proud of and why.",
        ],
    )


def fallback_tasks(profile: AnalyzedProfile, job_title: str | None = None) -> TaskSet:
    skills = ", ".join(profile.technical_skills[:3]) if profile.technical_skills else profile.interests
    role = job_title if job_title and job_title != "Not specified" else f"{profile.career_level} engineer"
    return TaskSet(
        technical_tasks=[
            f"Build a small service for a {role} use case using {skills}, with a README explaining design choices.",
            "Add automated tests covering the main flows and one failure case.",
        ],
        scenario_tasks=[
            f"A production incident affects a feature you own in the {profile.industry} domain. "
            "Describe how you would triage, communicate and resolve it.",
            "Your team must deliver a critical feature in half the planned time. Explain what you would cut and why.",
        ],
    )
