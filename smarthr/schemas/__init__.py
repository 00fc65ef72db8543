from .candidates import (
    SHORTLISTED_STATUS,
    CandidateRecord,
    CandidateUpdate,
    ErrorResponse,
    NotShortlistedResponse,
    TaskQuestionsResponse,
    UploadResponse,
)
from .documents import BlobLocation, DocumentKind, ExtractedText, ExtractionMethod, RawDocument
from .profile import (
    QUESTIONS_PER_CATEGORY,
    AnalyzedProfile,
    CandidateProfile,
    CareerLevel,
    EducationTier,
    JobDescriptionRecord,
    QuestionSet,
    TaskSet,
)

__all__ = [
    "RawDocument",
    "BlobLocation",
    "DocumentKind",
    "ExtractedText",
    "ExtractionMethod",
    "CandidateProfile",
    "AnalyzedProfile",
    "CareerLevel",
    "EducationTier",
    "JobDescriptionRecord",
    "QuestionSet",
    "TaskSet",
    "QUESTIONS_PER_CATEGORY",
    "CandidateRecord",
    "CandidateUpdate",
    "UploadResponse",
    "TaskQuestionsResponse",
    "ErrorResponse",
    "NotShortlistedResponse",
    "SHORTLISTED_STATUS",
]
