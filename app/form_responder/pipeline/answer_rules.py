from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..schemas import Answer, FieldDescriptor, InputType

RE_NUMBER = re.compile(r"^[+-]?\d+(?:[.,](\d+))?$")


@dataclass
class RuleResult:
    is_valid: bool
    reasons: List[str]
    normalized: Optional[Answer] = None


def _parse_number(value: object) -> Optional[Answer]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value) if value.is_integer() else value
    raw = str(value).strip()
    match = RE_NUMBER.match(raw)
    if not match:
        return None
    # "1.500" and "1,000" read as thousands or decimals depending on locale.
    if match.group(1) is not None and len(match.group(1)) == 3:
        return None
    number = float(raw.replace(",", "."))
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def validate_number(value: object) -> RuleResult:
    parsed = _parse_number(value)
    if parsed is None:
        return RuleResult(False, ["number_format"], None)
    return RuleResult(True, ["number_ok"], parsed)


def validate_select(value: object, options: Optional[Sequence[str]]) -> RuleResult:
    text = str(value)
    if not options:
        return RuleResult(True, ["select_unconstrained"], text)
    if text in options:
        return RuleResult(True, ["select_ok"], text)
    folded = text.strip().casefold()
    for option in options:
        if option.strip().casefold() == folded:
            return RuleResult(True, ["select_normalize"], option)
    return RuleResult(False, ["select_not_in_values"], None)


def validate_text(value: object, max_length: Optional[int]) -> RuleResult:
    text = str(value).strip()
    if max_length is not None and len(text) > max_length:
        return RuleResult(True, ["text_truncated"], text[:max_length].rstrip())
    return RuleResult(True, ["text_ok"], text)


def validate_answer(descriptor: FieldDescriptor, value: object) -> RuleResult:
    if value is None:
        return RuleResult(False, ["empty"], None)
    if descriptor.input_type == InputType.NUMBER:
        return validate_number(value)
    if descriptor.input_type == InputType.SELECT:
        return validate_select(value, descriptor.values)
    return validate_text(value, descriptor.max_length)


def check_answer_set(
    descriptors: Sequence[FieldDescriptor],
    answers: Sequence[object],
) -> Tuple[List[Answer], List[Dict[str, object]]]:
    """Validate answers position by position.

    Returns the normalized answers and a list of issues. Any issue means the
    answer set must be rejected.
    """
    if len(answers) != len(descriptors):
        issue = {
            "rule": "answer_count",
            "message": f"Expected {len(descriptors)} answers, got {len(answers)}",
        }
        return [], [issue]

    normalized: List[Answer] = []
    issues: List[Dict[str, object]] = []
    for index, (descriptor, value) in enumerate(zip(descriptors, answers)):
        result = validate_answer(descriptor, value)
        if not result.is_valid:
            issues.append(
                {
                    "index": index,
                    "title": descriptor.title,
                    "rule": result.reasons[0],
                    "value": value,
                }
            )
            continue
        normalized.append(result.normalized)
    return normalized, issues
