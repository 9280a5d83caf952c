from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..pipeline.response_schema import GenerationConfig
from ..result import ErrorKind
from .http import GeminiHttpClient, GenerativeModelError

LOGGER = logging.getLogger(__name__)


def text_part(text: str) -> Dict[str, object]:
    return {"text": text}


def file_part(file_uri: str, mime_type: str = "application/pdf") -> Dict[str, object]:
    return {"fileData": {"mimeType": mime_type, "fileUri": file_uri}}


def _response_text(data: Dict) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        feedback = data.get("promptFeedback") or {}
        reason = feedback.get("blockReason") or "no candidates"
        raise GenerativeModelError(ErrorKind.INVALID_RESPONSE, f"Model returned no answer ({reason})")
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    text = "".join(str(part.get("text", "")) for part in parts if isinstance(part, dict))
    if not text.strip():
        finish = candidates[0].get("finishReason") or "unknown"
        raise GenerativeModelError(ErrorKind.INVALID_RESPONSE, f"Model returned empty text (finishReason={finish})")
    return text


class GenerativeModelClient(GeminiHttpClient):
    error_cls = GenerativeModelError

    def generate_content(
        self,
        parts: List[Dict[str, object]],
        generation_config: GenerationConfig,
        system_instruction: Optional[str] = None,
    ) -> str:
        """Run one ``generateContent`` call and return the concatenated text of the first candidate."""
        payload: Dict[str, object] = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config.to_payload(),
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [text_part(system_instruction)]}
        url = self.url(f"models/{self.config.model}:generateContent")
        LOGGER.debug("generateContent model=%s parts=%d", self.config.model, len(parts))
        data = self.request_json("POST", url, json=payload)
        return _response_text(data)
