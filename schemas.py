from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models import EmploymentType, ExperienceLevel, LocationType, SalaryPeriod, Stage


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _to_float(v) -> float:
    try:
        return float(v)
    except OverflowError:
        raise ValueError("number out of range")


def _clamp_score(v) -> int:
    return int(round(max(0.0, min(100.0, _to_float(v)))))


# Match analysis as returned by the completion provider
class MatchAnalysis(CamelModel):
    overall_score: int
    matching_skills: List[str]
    missing_skills: List[str]
    experience_gap: str
    recommendations: List[str]

    @field_validator("overall_score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("overallScore must be a number")
        return _clamp_score(v)

    @property
    def extracted_skills(self) -> List[str]:
        return [*self.matching_skills, *self.missing_skills]


class CoverLetterBullet(CamelModel):
    text: str
    relevance: float
    target_requirement: str

    @field_validator("relevance", mode="before")
    @classmethod
    def clamp_relevance(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("relevance must be a number")
        return max(0.0, min(100.0, _to_float(v)))


# Job-scan payload from the browser extension. Required fields are checked by
# the route so that an empty string is rejected the same way as a missing one.
class JobScanIn(CamelModel):
    title: Optional[str] = None
    company_name: Optional[str] = None
    company_logo_url: Optional[str] = None
    company_website: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    location: Optional[str] = None
    location_type: Optional[LocationType] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_currency: Optional[str] = None
    salary_period: Optional[SalaryPeriod] = None
    employment_type: Optional[EmploymentType] = None
    experience_level: Optional[ExperienceLevel] = None
    source_url: Optional[str] = None
    source_site: Optional[str] = None

    def missing_required(self) -> List[str]:
        required = ("title", "company_name", "description", "source_url", "source_site")
        return [f for f in required if not (getattr(self, f) or "").strip()]


class CompanyOut(CamelModel):
    id: int
    name: str
    logo_url: Optional[str] = None
    website: Optional[str] = None


class ApplicationSummary(CamelModel):
    id: int
    job_id: int
    stage: Stage
    notes: Optional[str] = None
    applied_date: Optional[datetime] = None
    interview_date: Optional[datetime] = None
    offer_date: Optional[datetime] = None
    rejected_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobBase(CamelModel):
    id: int
    title: str
    company: CompanyOut
    description: str
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    location: Optional[str] = None
    location_type: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_currency: Optional[str] = None
    salary_period: Optional[str] = None
    employment_type: Optional[str] = None
    experience_level: Optional[str] = None
    source_url: str
    source_site: str
    match_score: Optional[int] = None
    matching_skills: Optional[List[str]] = None
    missing_skills: Optional[List[str]] = None
    extracted_skills: Optional[List[str]] = None
    cover_letter_bullets: Optional[List[CoverLetterBullet]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobOut(JobBase):
    application: Optional[ApplicationSummary] = None


class ApplicationOut(ApplicationSummary):
    job: JobBase


class ScanResult(CamelModel):
    job: JobOut
    is_new: bool
    analyzed: bool = False
    message: Optional[str] = None


class ApplicationCreate(CamelModel):
    job_id: Optional[int] = None


class ApplicationUpdate(CamelModel):
    stage: Optional[Stage] = None
    notes: Optional[str] = None
    interview_date: Optional[datetime] = None
    offer_date: Optional[datetime] = None
    rejected_date: Optional[datetime] = None


class ProfileBase(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    resume_text: Optional[str] = None
    cover_letter_template: Optional[str] = None


class ProfileUpdate(ProfileBase):
    pass


class ProfileOut(ProfileBase):
    id: int
    resume_file_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ResumeUploadOut(CamelModel):
    text: str
    file_name: str


class LoginIn(BaseModel):
    passcode: Optional[str] = None


class ExtractIn(CamelModel):
    page_content: Optional[str] = None
    page_url: Optional[str] = None
    page_title: Optional[str] = ""


class MetricsOut(CamelModel):
    total_jobs: int
    applied_jobs: int
    interview_jobs: int
    offer_jobs: int
    avg_match_score: float = Field(default=0.0)
    recent_jobs: List[JobBase] = []
