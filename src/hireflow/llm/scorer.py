from __future__ import annotations

import logging
import math
from typing import Any

from hireflow.llm.extractor import InfoExtractor
from hireflow.llm.prompts import RESUME_ANALYSIS_PROMPT
from hireflow.llm.providers import TextCompletionProvider, parse_json_object
from hireflow.types import (
    ExtractedInfo,
    ScoreOutcome,
    ScoreRequest,
    ScoreResult,
    ScoringRubric,
    coerce_string_list,
)

logger = logging.getLogger(__name__)

DEGREE_LABELS = {
    "high_school": "High school diploma",
    "associate": "Associate degree",
    "bachelor": "Bachelor's degree",
    "master": "Master's degree",
    "doctorate": "Doctorate",
}

PLACEHOLDER_STRENGTHS = ["Resume format is clear"]
PLACEHOLDER_WEAKNESSES = ["Automated analysis unavailable"]
PLACEHOLDER_RECOMMENDATIONS = ["Manual review recommended"]

NO_DETAIL_TEXT = "No additional detailed requirements"
UNPARSED_ANALYSIS = "AI analysis response could not be parsed; manual review recommended"


class FitScorer:
    """Scores résumé text against a job description and weighted rubric.

    ``analyze`` never raises. A reply that cannot be parsed produces an
    ``unparsed`` sentinel, and a failed model call produces a ``failed``
    sentinel whose analysis text names the error.
    """

    def __init__(
        self,
        provider: TextCompletionProvider | None,
        extractor: InfoExtractor,
        *,
        model: str,
    ):
        self.provider = provider
        self.extractor = extractor
        self.model = model

    @property
    def configured(self) -> bool:
        return self.provider is not None

    def analyze(self, request: ScoreRequest) -> ScoreResult:
        extraction = self.extractor.extract_personal_info(request.resume_text)
        info = extraction.info

        if self.provider is None:
            return sentinel_result("failed", info, "no language model configured")

        prompt = RESUME_ANALYSIS_PROMPT.format(
            job_description=request.job_description,
            job_description_detail=request.job_description_detail or NO_DETAIL_TEXT,
            rubric_text=render_rubric(request.rubric),
            resume_text=request.resume_text,
            extracted_info_json=info.model_dump_json(indent=2),
        )
        logger.info(
            "Scoring resume prompt_chars=%d resume_chars=%d",
            len(prompt),
            len(request.resume_text),
        )

        try:
            response = self.provider.complete_text(model=self.model, prompt=prompt)
        except Exception as exc:
            logger.warning("Resume scoring call failed error=%s", exc)
            return sentinel_result("failed", info, str(exc) or type(exc).__name__)

        data = parse_json_object(response.content)
        if data is None:
            return sentinel_result("unparsed", info, "model reply did not contain a JSON object")

        percentage = coerce_percentage(data.get("matchPercentage", data.get("match_percentage")))
        if percentage is None:
            return sentinel_result("unparsed", info, "model reply had no usable matchPercentage")

        result = ScoreResult(
            outcome="scored",
            match_percentage=percentage,
            analysis=_text(data.get("analysis")),
            strengths=_safe_list(data.get("strengths")),
            weaknesses=_safe_list(data.get("weaknesses")),
            recommendations=_safe_list(data.get("recommendations")),
            extracted_info=info,
        )
        logger.info(
            "Resume scored match=%d strengths=%d weaknesses=%d recommendations=%d",
            result.match_percentage,
            len(result.strengths),
            len(result.weaknesses),
            len(result.recommendations),
        )
        return result


def sentinel_result(outcome: ScoreOutcome, info: ExtractedInfo, error: str) -> ScoreResult:
    if outcome == "failed":
        analysis = f"Error during analysis: {error}"
    else:
        analysis = UNPARSED_ANALYSIS
    return ScoreResult(
        outcome=outcome,
        match_percentage=0,
        analysis=analysis,
        strengths=list(PLACEHOLDER_STRENGTHS),
        weaknesses=list(PLACEHOLDER_WEAKNESSES),
        recommendations=list(PLACEHOLDER_RECOMMENDATIONS),
        extracted_info=info,
        error=error,
    )


def coerce_percentage(value: Any) -> int | None:
    """Read the model's percentage as an int without clamping it."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(round(number))


def format_degree(code: str) -> str:
    return DEGREE_LABELS.get(code, code)


def render_rubric(rubric: ScoringRubric) -> str:
    tech = rubric.technical_skills
    exp = rubric.experience
    edu = rubric.education
    lang = rubric.languages
    soft = rubric.soft_skills

    sections = [
        f"Technical skills (weight: {tech.weight}%)",
        f"  Required skills: {_joined(tech.required_skills)}",
    ]
    if tech.preferred_skills:
        sections.append(f"  Preferred skills: {', '.join(tech.preferred_skills)}")

    sections.append(f"\nExperience (weight: {exp.weight}%)")
    sections.append(f"  Minimum years: {exp.min_years}")
    if exp.preferred_domains:
        sections.append(f"  Preferred domains: {', '.join(exp.preferred_domains)}")

    sections.append(f"\nEducation (weight: {edu.weight}%)")
    sections.append(f"  Minimum degree: {format_degree(edu.min_degree)}")
    if edu.preferred_majors:
        sections.append(f"  Preferred majors: {', '.join(edu.preferred_majors)}")

    sections.append(f"\nLanguages (weight: {lang.weight}%)")
    sections.append(f"  Required languages: {_joined(lang.required_languages)}")
    if lang.preferred_languages:
        sections.append(f"  Preferred languages: {', '.join(lang.preferred_languages)}")

    sections.append(f"\nSoft skills (weight: {soft.weight}%)")
    if soft.preferred_skills:
        sections.append(f"  Valued skills: {', '.join(soft.preferred_skills)}")

    return "\n".join(sections)


def _joined(items: list[str]) -> str:
    return ", ".join(items) if items else "none specified"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _safe_list(value: Any) -> list[str]:
    try:
        return coerce_string_list(value)
    except ValueError:
        return []
