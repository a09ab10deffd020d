from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

ProcessingStatus = Literal["pending", "processing", "completed", "failed"]
LanguageLevel = Literal["basic", "intermediate", "advanced", "native", "professional"]
ExtractionErrorKind = Literal[
    "too_large",
    "empty",
    "unsupported_format",
    "legacy_format",
    "corrupt",
    "no_text",
]
ScoreOutcome = Literal["scored", "unparsed", "failed"]

LANGUAGE_LEVELS: tuple[str, ...] = ("basic", "intermediate", "advanced", "native", "professional")


def _text_or_none(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    raise ValueError(f"expected text, got {type(value).__name__}")


def coerce_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        raise ValueError("expected a list of strings")

    items: list[str] = []
    seen: set[str] = set()
    for raw in value:
        text = _text_or_none(raw) if not isinstance(raw, (dict, list)) else None
        if text is None or text in seen:
            continue
        seen.add(text)
        items.append(text)
    return items


class UploadedDocument(BaseModel):
    data: bytes
    file_name: str
    declared_mime_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


class ExtractedDocument(BaseModel):
    ok: Literal[True] = True
    text: str
    file_name: str
    file_size: int


class ExtractionFailure(BaseModel):
    ok: Literal[False] = False
    kind: ExtractionErrorKind
    error: str
    file_name: str
    file_size: int


DocumentExtraction = ExtractedDocument | ExtractionFailure


class LanguageSkill(BaseModel):
    language: str
    level: LanguageLevel | None = None

    @field_validator("language", mode="before")
    @classmethod
    def require_language(cls, value: Any) -> str:
        text = _text_or_none(value)
        if text is None:
            raise ValueError("language is required")
        return text

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        lowered = value.strip().lower()
        return lowered if lowered in LANGUAGE_LEVELS else None


class EducationEntry(BaseModel):
    school: str = ""
    degree: str = ""
    major: str | None = None
    graduation_year: str | None = None
    gpa: str | None = None

    @field_validator("school", "degree", mode="before")
    @classmethod
    def coerce_required_text(cls, value: Any) -> str:
        return _text_or_none(value) or ""

    @field_validator("major", "graduation_year", "gpa", mode="before")
    @classmethod
    def coerce_optional_text(cls, value: Any) -> str | None:
        return _text_or_none(value)


class ExperienceEntry(BaseModel):
    company: str = ""
    position: str = ""
    duration: str = ""
    start_date: str | None = None
    end_date: str | None = None
    description: str | None = None
    skills: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)

    @field_validator("company", "position", "duration", mode="before")
    @classmethod
    def coerce_required_text(cls, value: Any) -> str:
        return _text_or_none(value) or ""

    @field_validator("start_date", "end_date", "description", mode="before")
    @classmethod
    def coerce_optional_text(cls, value: Any) -> str | None:
        return _text_or_none(value)

    @field_validator("skills", "achievements", mode="before")
    @classmethod
    def coerce_lists(cls, value: Any) -> list[str]:
        return coerce_string_list(value)


class ExtractedInfo(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    summary: str | None = None
    education: list[EducationEntry] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    languages: list[LanguageSkill] = Field(default_factory=list)

    @field_validator("name", "email", "phone", "location", "summary", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str | None:
        return _text_or_none(value)

    @field_validator("skills", mode="before")
    @classmethod
    def coerce_skills(cls, value: Any) -> list[str]:
        return coerce_string_list(value)


class InfoExtraction(BaseModel):
    status: Literal["extracted", "degraded"]
    info: ExtractedInfo = Field(default_factory=ExtractedInfo)
    error: str = ""

    @property
    def degraded(self) -> bool:
        return self.status == "degraded"


class TechnicalSkillsCriteria(BaseModel):
    weight: int = 40
    required_skills: list[str] = Field(default_factory=list)
    preferred_skills: list[str] = Field(default_factory=list)


class ExperienceCriteria(BaseModel):
    weight: int = 25
    min_years: int = 0
    preferred_domains: list[str] = Field(default_factory=list)


class EducationCriteria(BaseModel):
    weight: int = 15
    min_degree: str = "bachelor"
    preferred_majors: list[str] = Field(default_factory=list)


class LanguageCriteria(BaseModel):
    weight: int = 10
    required_languages: list[str] = Field(default_factory=list)
    preferred_languages: list[str] = Field(default_factory=list)


class SoftSkillsCriteria(BaseModel):
    weight: int = 10
    preferred_skills: list[str] = Field(default_factory=list)


class ScoringRubric(BaseModel):
    """Five weighted scoring categories attached to a job posting.

    Weights are percentages that are expected to add up to 100, but nothing
    enforces or rescales them; the model is told the raw weights.
    """

    technical_skills: TechnicalSkillsCriteria = Field(default_factory=TechnicalSkillsCriteria)
    experience: ExperienceCriteria = Field(default_factory=ExperienceCriteria)
    education: EducationCriteria = Field(default_factory=EducationCriteria)
    languages: LanguageCriteria = Field(default_factory=LanguageCriteria)
    soft_skills: SoftSkillsCriteria = Field(default_factory=SoftSkillsCriteria)

    @property
    def total_weight(self) -> int:
        return (
            self.technical_skills.weight
            + self.experience.weight
            + self.education.weight
            + self.languages.weight
            + self.soft_skills.weight
        )


class JobRequirements(BaseModel):
    job_id: int
    title: str = ""
    description: str
    description_detail: str | None = None
    ai_analysis_enabled: bool = True
    rubric: ScoringRubric = Field(default_factory=ScoringRubric)


class ScoreRequest(BaseModel):
    resume_text: str
    job_description: str
    job_description_detail: str | None = None
    rubric: ScoringRubric = Field(default_factory=ScoringRubric)


class ScoreResult(BaseModel):
    outcome: ScoreOutcome
    match_percentage: int = 0
    analysis: str = ""
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    extracted_info: ExtractedInfo = Field(default_factory=ExtractedInfo)
    error: str = ""

    @property
    def call_failed(self) -> bool:
        return self.outcome == "failed"


class ModelResponse(BaseModel):
    content: str
    raw: dict[str, Any] = Field(default_factory=dict)


class ProcessResumeResult(BaseModel):
    success: bool
    candidate_id: int | None = None
    processing_status: ProcessingStatus | None = None
    error: str = ""
    error_kind: ExtractionErrorKind | None = None
    analysis: ScoreResult | None = None


class BatchReanalysisResult(BaseModel):
    success: int = 0
    failed: int = 0
