from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

CareerLevel = Literal["Entry-level", "Mid-level", "Senior", "Experienced"]
EducationTier = Literal["Advanced Degree", "Bachelor's Degree", "Technical Background"]

QUESTIONS_PER_CATEGORY = 5


class CandidateProfile(BaseModel):
    name: str = "Unknown"
    email: str = Field(min_length=3)
    phone: str = "Not provided"


class AnalyzedProfile(BaseModel):
    projects: str
    technical_skills: list[str] = Field(default_factory=list)
    interests: str
    career_level: CareerLevel = "Mid-level"
    industry: str = "Technology"
    has_leadership: bool = False
    leadership: str
    education: EducationTier = "Technical Background"
    achievements: str


class JobDescriptionRecord(BaseModel):
    jd_text: str = Field(min_length=1)
    job_title: str = "Not specified"
    required_skills: str
    experience_required: str
    company: str
    jd_url: str = ""
    jd_key: str = ""
    extraction_method: str = ""


class QuestionSet(BaseModel):
    technical: list[str]
    behavioral: list[str]

    @field_validator("technical", "behavioral")
    @classmethod
    def _validate_count(cls, value: list[str]) -> list[str]:
        if len(value) != QUESTIONS_PER_CATEGORY:
            raise ValueError(f"exactly {QUESTIONS_PER_CATEGORY} questions are required per category")
        return value


class TaskSet(BaseModel):
    technical_tasks: list[str] = Field(min_length=1)
    scenario_tasks: list[str] = Field(min_length=1)
