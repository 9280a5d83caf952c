from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional

from ..clients.gemini import GenerativeModelClient, file_part, text_part
from ..clients.http import GenerativeModelError
from ..config import CONFIG
from ..result import Err, ErrorKind, Ok, Result
from ..schemas import Answer
from .answer_rules import check_answer_set
from .form_extract import parse_descriptors
from .prompts import (
    DOCUMENT_GROUNDING_PROMPT,
    build_answer_instructions,
    build_context_prompt,
    build_questions_prompt,
)
from .response_schema import GenerationConfig, string_array

LOGGER = logging.getLogger(__name__)

ANSWER_GENERATION_CONFIG = GenerationConfig(response_schema=string_array())


def build_answer_parts(
    form_questions: str,
    context: str,
    file_uri: Optional[str] = None,
    language: Optional[str] = None,
) -> List[Dict[str, object]]:
    parts: List[Dict[str, object]] = []
    if file_uri:
        parts.append(text_part(DOCUMENT_GROUNDING_PROMPT))
        parts.append(file_part(file_uri, CONFIG.upload.mime_type))
    if context:
        parts.append(text_part(build_context_prompt(context)))
    parts.append(text_part(build_answer_instructions(language or CONFIG.answer.language)))
    parts.append(text_part(build_questions_prompt(form_questions)))
    return parts


def _parse_answers(text: str) -> List[object]:
    try:
        parsed = json.loads(text)
    except ValueError as exc:
        raise GenerativeModelError(ErrorKind.INVALID_RESPONSE, f"Answers are not valid JSON: {exc}") from exc
    if not isinstance(parsed, list):
        raise GenerativeModelError(ErrorKind.INVALID_RESPONSE, "Answers must be a JSON array")
    return parsed


def answer_questions(
    form_questions: str,
    context: str,
    model: GenerativeModelClient,
    file_uri: Optional[str] = None,
) -> Result[List[Answer]]:
    """Generate one answer per extracted field, in field order."""
    try:
        descriptors = parse_descriptors(form_questions)
    except GenerativeModelError as exc:
        LOGGER.error("Cannot answer malformed form analysis: %s", exc)
        return Err(exc.kind, str(exc))
    if not descriptors:
        LOGGER.info("Form has no fields; skipping answer generation")
        return Ok([])

    parts = build_answer_parts(form_questions, context, file_uri)
    try:
        text = model.generate_content(parts, ANSWER_GENERATION_CONFIG)
        raw_answers = _parse_answers(text)
    except GenerativeModelError as exc:
        LOGGER.error("Answer generation failed: %s", exc)
        return Err(exc.kind, f"Error generating answers: {exc}")

    answers, issues = check_answer_set(descriptors, raw_answers)
    if issues:
        LOGGER.warning("Rejected %d answer(s): %s", len(issues), issues)
        return Err(
            ErrorKind.INVALID_RESPONSE,
            "Generated answers do not match the form fields",
            {"issues": issues},
        )
    LOGGER.info("Generated %d answers (document=%s)", len(answers), bool(file_uri))
    return Ok(answers)
