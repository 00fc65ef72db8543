from __future__ import annotations

from typing import Literal

from smarthr.normalize.utils import clip
from smarthr.schemas.profile import AnalyzedProfile, CandidateProfile, JobDescriptionRecord

PromptTask = Literal["initial_questions", "personalized_questions", "task_questions"]

RESUME_EXCERPT_CHARS: dict[str, int] = {
    "initial_questions": 2000,
    "personalized_questions": 2500,
    "task_questions": 1500,
}
JD_EXCERPT_CHARS = 1500

TECHNICAL_RANGE = (1, 5)
BEHAVIORAL_RANGE = (6, 10)
TECHNICAL_TASK_RANGE = (1, 3)
SCENARIO_TASK_RANGE = (4, 6)


def _numbered_slots(start: int, end: int) -> str:
    return "\n".join(f"{number}. " for number in range(start, end + 1))


def _profile_block(candidate: CandidateProfile, profile: AnalyzedProfile) -> str:
    return (
        f"Candidate: {candidate.name}\n"
        f"Career level: {profile.career_level}\n"
        f"Industry: {profile.industry}\n"
        f"Education: {profile.education}\n"
        f"Technical interests: {profile.interests}\n"
        f"Projects: {profile.projects}\n"
        f"Achievements: {profile.achievements}\n"
        f"Leadership: {profile.leadership}"
    )


def _jd_block(jd: JobDescriptionRecord | None) -> str:
    if jd is None:
        return ""
    return (
        "\n\nJob description:\n"
        f"Title: {jd.job_title}\n"
        f"Company: {jd.company}\n"
        f"Required skills: {jd.required_skills}\n"
        f"Experience required: {jd.experience_required}\n"
        f"Excerpt: {clip(jd.jd_text, JD_EXCERPT_CHARS)}"
    )


def _initial_questions(
    text: str, candidate: CandidateProfile, profile: AnalyzedProfile, jd: JobDescriptionRecord | None, job_title: str | None
) -> str:
    return (
        "Generate exactly 10 interview questions for this resume:\n\n"
        "Candidate profile:\n"
        f"{_profile_block(candidate, profile)}\n\n"
        f"Technical Questions ({TECHNICAL_RANGE[0]}-{TECHNICAL_RANGE[1]}):\n"
        f"{_numbered_slots(*TECHNICAL_RANGE)}\n\n"
        f"Behavioural Questions ({BEHAVIORAL_RANGE[0]}-{BEHAVIORAL_RANGE[1]}):\n"
        f"{_numbered_slots(*BEHAVIORAL_RANGE)}\n\n"
        f"Resume: {clip(text, RESUME_EXCERPT_CHARS['initial_questions'])}"
        f"{_jd_block(jd)}\n\n"
        "Output only the numbered questions, nothing else."
    )


def _personalized_questions(
    text: str, candidate: CandidateProfile, profile: AnalyzedProfile, jd: JobDescriptionRecord | None, job_title: str | None
) -> str:
    focus = (
        f"Tailor the questions to the {jd.job_title} role and probe the candidate's fit for its required skills."
        if jd is not None
        else "Tailor the questions to the candidate's own projects, skills and career level."
    )
    return (
        "You are an experienced technical interviewer preparing for a candidate interview.\n"
        f"{focus}\n\n"
        "Candidate profile:\n"
        f"{_profile_block(candidate, profile)}"
        f"{_jd_block(jd)}\n\n"
        f"Resume excerpt:\n{clip(text, RESUME_EXCERPT_CHARS['personalized_questions'])}\n\n"
        "Write exactly 10 questions using this numbering and nothing else:\n"
        f"Technical Questions ({TECHNICAL_RANGE[0]}-{TECHNICAL_RANGE[1]}):\n"
        f"{_numbered_slots(*TECHNICAL_RANGE)}\n\n"
        f"Behavioural Questions ({BEHAVIORAL_RANGE[0]}-{BEHAVIORAL_RANGE[1]}):\n"
        f"{_numbered_slots(*BEHAVIORAL_RANGE)}"
    )


def _task_questions(
    text: str, candidate: CandidateProfile, profile: AnalyzedProfile, jd: JobDescriptionRecord | None, job_title: str | None
) -> str:
    if jd is not None:
        role = jd.job_title
    elif job_title and job_title != "Not specified":
        role = job_title
    else:
        role = f"{profile.career_level} {profile.industry} engineer"
    return (
        f"The candidate {candidate.name} has been shortlisted for a {role} position.\n"
        "Design a take-home assessment for them.\n\n"
        "Candidate profile:\n"
        f"{_profile_block(candidate, profile)}"
        f"{_jd_block(jd)}\n\n"
        f"Resume excerpt:\n{clip(text, RESUME_EXCERPT_CHARS['task_questions'])}\n\n"
        "Write exactly 6 tasks using this numbering and nothing else:\n"
        f"Technical Tasks ({TECHNICAL_TASK_RANGE[0]}-{TECHNICAL_TASK_RANGE[1]}):\n"
        f"{_numbered_slots(*TECHNICAL_TASK_RANGE)}\n\n"
        f"Scenario Tasks ({SCENARIO_TASK_RANGE[0]}-{SCENARIO_TASK_RANGE[1]}):\n"
        f"{_numbered_slots(*SCENARIO_TASK_RANGE)}\n\n"
        "Each task must be one line describing a concrete deliverable."
    )


_BUILDERS = {
    "initial_questions": _initial_questions,
    "personalized_questions": _personalized_questions,
    "task_questions": _task_questions,
}


def build_prompt(
    task: PromptTask,
    candidate_text: str,
    profile: AnalyzedProfile,
    jd: JobDescriptionRecord | None,
    candidate: CandidateProfile,
    *,
    job_title: str | None = None,
) -> str:
    try:
        builder = _BUILDERS[task]
    except KeyError:
        raise ValueError(f"Unknown prompt task '{task}'") from None
    return builder(candidate_text or "", candidate, profile, jd, job_title)
