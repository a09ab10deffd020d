from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from hireflow.llm.prompts import PERSONAL_INFO_PROMPT
from hireflow.llm.providers import TextCompletionProvider, parse_json_object
from hireflow.types import (
    EducationEntry,
    ExperienceEntry,
    ExtractedInfo,
    InfoExtraction,
    LanguageSkill,
)

logger = logging.getLogger(__name__)

_SCALAR_FIELDS = ("name", "email", "phone", "location", "summary", "skills")


class InfoExtractor:
    """Pulls a structured person record out of résumé text with one model call.

    Extraction is best effort: any failure yields a ``degraded`` result with an
    all-empty ``ExtractedInfo`` instead of an exception.
    """

    def __init__(self, provider: TextCompletionProvider | None, *, model: str):
        self.provider = provider
        self.model = model

    def extract_personal_info(self, resume_text: str) -> InfoExtraction:
        if self.provider is None:
            return _degraded("no language model configured")

        prompt = PERSONAL_INFO_PROMPT.format(resume_text=resume_text or "")
        try:
            response = self.provider.complete_text(model=self.model, prompt=prompt)
        except Exception as exc:
            logger.warning("Personal info extraction call failed error=%s", exc)
            return _degraded(f"model call failed: {exc}")

        data = parse_json_object(response.content)
        if data is None:
            return _degraded("model reply did not contain a JSON object")

        info = coerce_extracted_info(data)
        logger.info(
            "Extracted personal info name_found=%s education=%d experience=%d skills=%d",
            info.name is not None,
            len(info.education),
            len(info.experience),
            len(info.skills),
        )
        return InfoExtraction(status="extracted", info=info)


def coerce_extracted_info(data: dict[str, Any]) -> ExtractedInfo:
    """Validate a model payload field by field, dropping what does not fit."""
    fields: dict[str, Any] = {}
    for key in _SCALAR_FIELDS:
        if key not in data:
            continue
        try:
            fields.update(ExtractedInfo.model_validate({key: data[key]}).model_dump(include={key}))
        except ValidationError:
            logger.warning("Dropping malformed extracted field=%s", key)

    fields["education"] = _valid_entries(data.get("education"), EducationEntry)
    fields["experience"] = _valid_entries(data.get("experience"), ExperienceEntry)
    fields["languages"] = _valid_entries(
        [{"language": item} if isinstance(item, str) else item for item in _as_list(data.get("languages"))],
        LanguageSkill,
    )
    return ExtractedInfo(**fields)


def _valid_entries(raw: Any, model: type[BaseModel]) -> list[Any]:
    entries = []
    for item in _as_list(raw):
        if not isinstance(item, dict):
            continue
        try:
            entries.append(model.model_validate(item))
        except ValidationError:
            continue
    return entries


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _degraded(reason: str) -> InfoExtraction:
    logger.warning("Personal info extraction degraded: %s", reason)
    return InfoExtraction(status="degraded", info=ExtractedInfo(), error=reason)
