from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SHORTLISTED_STATUS = "Shortlisted"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CandidateRecord(CamelModel):
    email: str
    name: str = "Unknown"
    phone: str = "Not provided"
    status: str = "Pending"
    attendance: str = "Pending"
    rating: str = ""
    interview_date: str = ""
    notes: str = ""
    feedback: str = ""
    review_scores: dict[str, str] = Field(default_factory=dict)
    questions: str = ""
    task_questions: str = ""
    ai_used: bool = False
    personalized: bool = False
    enhanced_matching: bool = False
    task_questions_generated: bool = False
    resume_url: str = ""
    resume_key: str = ""
    resume_bucket: str = ""
    resume_content_type: str = ""
    resume_filename: str = ""
    jd_url: str = ""
    job_title: str = ""
    uploaded_at: str = ""
    updated_at: str = ""
    task_generated_at: str = ""
    version: int = 1


class CandidateUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    phone: str | None = Field(default=None, max_length=60)
    status: str | None = Field(default=None, max_length=60)
    attendance: str | None = Field(default=None, max_length=60)
    rating: str | None = Field(default=None, max_length=20)
    interview_date: str | None = Field(default=None, max_length=60)
    notes: str | None = Field(default=None, max_length=20000)
    feedback: str | None = Field(default=None, max_length=20000)
    review_scores: dict[str, str] | None = None
    version: int | None = Field(default=None, ge=1)

    def changed_fields(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True, exclude={"version"})


class UploadResponse(CandidateRecord):
    message: str = "Resume uploaded and processed successfully"


class TaskQuestionsResponse(CamelModel):
    task_questions: str
    generated: bool
    already_generated: bool = False


class ErrorResponse(CamelModel):
    error: str
    details: str | None = None


class NotShortlistedResponse(CamelModel):
    error: str = "not shortlisted"
    current_status: str
