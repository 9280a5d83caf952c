from __future__ import annotations

import json
import logging
from typing import List

from pydantic import ValidationError

from ..clients.gemini import GenerativeModelClient, text_part
from ..clients.http import GenerativeModelError
from ..result import ErrorKind
from ..schemas import FieldDescriptor, InputType
from .prompts import ANALYZE_FORM_PROMPT
from .response_schema import GenerationConfig, ResponseSchema, SchemaType

LOGGER = logging.getLogger(__name__)


FIELD_DESCRIPTOR_SCHEMA = ResponseSchema(
    type=SchemaType.ARRAY,
    items=ResponseSchema(
        type=SchemaType.OBJECT,
        properties={
            "title": ResponseSchema(type=SchemaType.STRING),
            "input_type": ResponseSchema(
                type=SchemaType.STRING,
                enum=[member.value for member in InputType],
            ),
            "values": ResponseSchema(
                type=SchemaType.ARRAY,
                items=ResponseSchema(type=SchemaType.STRING),
            ),
            "max_length": ResponseSchema(type=SchemaType.INTEGER),
        },
        required=["title", "input_type"],
    ),
)

ANALYZE_GENERATION_CONFIG = GenerationConfig(response_schema=FIELD_DESCRIPTOR_SCHEMA)


def analyze_form(form_markup: str, model: GenerativeModelClient) -> str:
    """Ask the model for the form's field descriptors.

    Returns the model's JSON text untouched. ``GenerativeModelError`` propagates
    to the caller.
    """
    text = model.generate_content(
        [text_part(form_markup)],
        ANALYZE_GENERATION_CONFIG,
        system_instruction=ANALYZE_FORM_PROMPT,
    )
    LOGGER.debug("Form analysis output: %s", text)
    return text


def parse_descriptors(serialized: str) -> List[FieldDescriptor]:
    try:
        raw = json.loads(serialized)
    except ValueError as exc:
        raise GenerativeModelError(ErrorKind.INVALID_RESPONSE, f"Form analysis is not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise GenerativeModelError(ErrorKind.INVALID_RESPONSE, "Form analysis must be a JSON array")
    try:
        return [FieldDescriptor.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise GenerativeModelError(ErrorKind.INVALID_RESPONSE, f"Invalid field descriptor: {exc}") from exc
