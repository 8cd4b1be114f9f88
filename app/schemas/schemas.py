"""
Pydantic Schemas - Request Validation

All API request schemas in one file for simplicity.
Clients send camelCase keys; models expose snake_case attributes.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting camelCase (or snake_case) keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    def changes(self) -> dict:
        """Fields the client actually sent, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


# ============================================================
# ENUMS
# ============================================================

class ExpLevel(str, Enum):
    entry = "Entry"
    mid = "Mid"
    senior = "Senior"


class Proficiency(str, Enum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    advanced = "Advanced"
    expert = "Expert"


class SkillCategory(str, Enum):
    technical = "Technical"
    soft_skills = "Soft Skills"
    languages = "Languages"
    industry_specific = "Industry-Specific"


class ProjectStatus(str, Enum):
    planned = "Planned"
    ongoing = "Ongoing"
    completed = "Completed"


class EmploymentType(str, Enum):
    full_time = "Full-time"
    part_time = "Part-time"
    contract = "Contract"
    internship = "Internship"
    temporary = "Temporary"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    interview = "interview"
    offer = "offer"
    rejected = "rejected"
    withdrawn = "withdrawn"


class ApplicationSource(str, Enum):
    company_website = "company-website"
    job_board = "job-board"
    recruiter = "recruiter"
    referral = "referral"
    networking = "networking"
    other = "other"


class SalaryPeriod(str, Enum):
    hourly = "hourly"
    monthly = "monthly"
    yearly = "yearly"


def check_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not re.search(r"[a-z]", value) or not re.search(r"[A-Z]", value) or not re.search(r"\d", value):
        raise ValueError("Password must contain at least one lowercase letter, one uppercase letter, and one number")
    return value


def check_http_url(value: Optional[str]) -> Optional[str]:
    if value and not re.match(r"^https?://.+", value):
        raise ValueError("Must be a valid http or https URL")
    return value


# ============================================================
# USER SCHEMAS
# ============================================================

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v):
        return check_password_strength(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v):
        return check_password_strength(v)


class DeleteAccountRequest(CamelModel):
    password: Optional[str] = None


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v):
        return check_password_strength(v)


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileUpdate(CamelModel):
    """
    Profile fields. Empty strings clear a field on update.
    First/last name and state are enforced on creation by the service.
    """
    first_name: Optional[str] = Field(None, max_length=255)
    middle_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=15)
    city: Optional[str] = Field(None, max_length=255)
    state: Optional[str] = None
    job_title: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = Field(None, max_length=500)
    industry: Optional[str] = Field(None, max_length=255)
    exp_level: Optional[str] = None

    @field_validator("state")
    @classmethod
    def state_code(cls, v):
        if v:
            if len(v) != 2:
                raise ValueError("State must be a 2-character code")
            return v.upper()
        return v

    @field_validator("exp_level")
    @classmethod
    def exp_level_value(cls, v):
        if v and v not in {e.value for e in ExpLevel}:
            raise ValueError("Experience level must be one of: Entry, Mid, Senior")
        return v


class ProfilePictureUpdate(CamelModel):
    file_path: Optional[str] = None


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    start_date: date
    end_date: Optional[date] = None
    is_current: bool = False
    description: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def check_dates(self):
        if self.is_current and self.end_date:
            raise ValueError("Current job cannot have an end date")
        if self.end_date and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class JobUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    company: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_current: Optional[bool] = None
    description: Optional[str] = Field(None, max_length=1000)


# ============================================================
# EDUCATION SCHEMAS
# ============================================================

class EducationCreate(CamelModel):
    school: str = Field(..., min_length=1, max_length=255)
    degree_type: str = Field(..., min_length=1, max_length=255)
    field: Optional[str] = Field(None, max_length=255)
    gpa: Optional[float] = Field(None, ge=0, le=4)
    is_enrolled: bool = False
    honors: Optional[str] = Field(None, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class EducationUpdate(CamelModel):
    school: Optional[str] = Field(None, min_length=1, max_length=255)
    degree_type: Optional[str] = Field(None, min_length=1, max_length=255)
    field: Optional[str] = Field(None, max_length=255)
    gpa: Optional[float] = Field(None, ge=0, le=4)
    is_enrolled: Optional[bool] = None
    honors: Optional[str] = Field(None, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# ============================================================
# SKILL SCHEMAS
# ============================================================

class SkillCreate(CamelModel):
    skill_name: str = Field(..., min_length=1, max_length=100)
    proficiency: Proficiency
    category: Optional[SkillCategory] = None
    skill_badge: Optional[str] = Field(None, max_length=500)

    @field_validator("skill_name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Skill name is required")
        return v


class SkillUpdate(CamelModel):
    proficiency: Optional[Proficiency] = None
    category: Optional[SkillCategory] = None
    skill_badge: Optional[str] = Field(None, max_length=500)


# ============================================================
# CERTIFICATION SCHEMAS
# ============================================================

class CertificationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    org_name: str = Field(..., min_length=1, max_length=255)
    date_earned: date
    expiration_date: Optional[date] = None
    never_expires: bool = False


class CertificationUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    org_name: Optional[str] = Field(None, min_length=1, max_length=255)
    date_earned: Optional[date] = None
    expiration_date: Optional[date] = None
    never_expires: Optional[bool] = None


# ============================================================
# PROJECT SCHEMAS
# ============================================================

class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    link: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=1000)
    start_date: date
    end_date: Optional[date] = None
    technologies: Optional[str] = Field(None, max_length=500)
    collaborators: Optional[str] = Field(None, max_length=500)
    status: ProjectStatus
    industry: Optional[str] = Field(None, max_length=255)

    @field_validator("link")
    @classmethod
    def link_url(cls, v):
        return check_http_url(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    link: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=1000)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    technologies: Optional[str] = Field(None, max_length=500)
    collaborators: Optional[str] = Field(None, max_length=500)
    status: Optional[ProjectStatus] = None
    industry: Optional[str] = Field(None, max_length=255)

    @field_validator("link")
    @classmethod
    def link_url(cls, v):
        return check_http_url(v)


# ============================================================
# APPLICATION SCHEMAS (MongoDB)
# ============================================================

class ApplicationLocation(CamelModel):
    city: Optional[str] = None
    state: Optional[str] = None
    country: str = "US"
    remote: bool = False


class ApplicationSalary(CamelModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)
    currency: str = "USD"
    period: SalaryPeriod = SalaryPeriod.yearly


class ApplicationContact(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    notes: Optional[str] = None


class ApplicationCreate(CamelModel):
    position: str = Field(..., min_length=1, max_length=100)
    company: str = Field(..., min_length=1, max_length=100)
    company_website: Optional[str] = None
    location: ApplicationLocation = Field(default_factory=ApplicationLocation)
    salary: ApplicationSalary = Field(default_factory=ApplicationSalary)
    employment_type: EmploymentType = EmploymentType.full_time
    status: ApplicationStatus = ApplicationStatus.pending
    source: ApplicationSource = ApplicationSource.job_board
    job_description: Optional[str] = Field(None, max_length=2000)
    notes: Optional[str] = Field(None, max_length=1000)
    applied_date: Optional[datetime] = None
    next_follow_up: Optional[datetime] = None
    contacts: List[ApplicationContact] = []
    tags: List[str] = []

    @field_validator("company_website")
    @classmethod
    def website_url(cls, v):
        return check_http_url(v)

    @field_validator("position", "company")
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be blank")
        return v

    @field_validator("tags")
    @classmethod
    def tag_length(cls, v):
        if any(len(tag) > 50 for tag in v):
            raise ValueError("Tag cannot exceed 50 characters")
        return v


class ApplicationUpdate(CamelModel):
    position: Optional[str] = Field(None, min_length=1, max_length=100)
    company: Optional[str] = Field(None, min_length=1, max_length=100)
    company_website: Optional[str] = None
    location: Optional[ApplicationLocation] = None
    salary: Optional[ApplicationSalary] = None
    employment_type: Optional[EmploymentType] = None
    status: Optional[ApplicationStatus] = None
    source: Optional[ApplicationSource] = None
    job_description: Optional[str] = Field(None, max_length=2000)
    notes: Optional[str] = Field(None, max_length=1000)
    applied_date: Optional[datetime] = None
    next_follow_up: Optional[datetime] = None
    contacts: Optional[List[ApplicationContact]] = None
    tags: Optional[List[str]] = None

    @field_validator("company_website")
    @classmethod
    def website_url(cls, v):
        return check_http_url(v)
