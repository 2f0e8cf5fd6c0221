from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict, Any
import json


def _none_to_empty(value):
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _clean_string_list(value):
    """Null becomes [], blank/null items are dropped, duplicates are kept."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return value
    cleaned = []
    for item in value:
        if item is None:
            continue
        if isinstance(item, (int, float)) and not isinstance(item, bool):
            item = str(item)
        if isinstance(item, str):
            item = item.strip()
            if not item:
                continue
        cleaned.append(item)
    return cleaned


# ----- Resume structure -----

class ExperienceEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    company: str = ""
    role: str = ""
    period: str = ""
    description: List[str] = Field(default_factory=list)

    blank_strings = field_validator("company", "role", "period", mode="before")(_none_to_empty)
    clean_description = field_validator("description", mode="before")(_clean_string_list)


class EducationEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    degree: str = ""
    university: str = ""
    period: str = ""

    blank_strings = field_validator("degree", "university", "period", mode="before")(_none_to_empty)


class ResumeDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    summary: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: Optional[EducationEntry] = None

    blank_strings = field_validator("name", "email", "phone", "linkedin", "summary", mode="before")(_none_to_empty)
    clean_skills = field_validator("skills", mode="before")(_clean_string_list)

    @field_validator("experience", mode="before")
    @classmethod
    def experience_list(cls, value):
        return [] if value is None else value

    @field_validator("education", mode="before")
    @classmethod
    def education_entry(cls, value):
        # Models sometimes answer with a list of schools; keep the first one
        if isinstance(value, list):
            return value[0] if value else None
        if value == {}:
            return None
        return value


# A tailored resume has exactly the same shape as the extracted one
TailoredResume = ResumeDocument


# ----- Agent stage outputs -----

class StrategicPlan(BaseModel):
    model_config = ConfigDict(extra="ignore")

    extractedSkills: List[str] = Field(default_factory=list)
    skillGap: List[str] = Field(default_factory=list)
    rewritePlan: str

    clean_lists = field_validator("extractedSkills", "skillGap", mode="before")(_clean_string_list)

    @field_validator("rewritePlan", mode="before")
    @classmethod
    def plan_text(cls, value):
        if isinstance(value, list):
            value = "\n".join(str(step) for step in value if step)
        elif isinstance(value, dict):
            value = json.dumps(value, indent=2)
        if not isinstance(value, str) or not value.strip():
            raise ValueError("rewritePlan must be a non-empty string")
        return value.strip()


class TailoredSections(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tailoredSummary: str
    tailoredExperience: List[ExperienceEntry]


# ----- API payloads -----

class Analysis(BaseModel):
    extractedSkills: List[str]
    skillGap: List[str]


class ProcessRequest(BaseModel):
    jobDescription: Optional[str] = None
    resumeText: Optional[str] = None


class ProcessResponse(BaseModel):
    tailoredResume: ResumeDocument
    analysis: Analysis
    suggestedJobs: List[Dict[str, Any]]
    jobSearchQuery: str


class GeneratePdfRequest(BaseModel):
    htmlContent: Optional[str] = None
