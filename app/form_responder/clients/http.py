from __future__ import annotations

from typing import Dict, Optional

import requests

from ..config import GeminiConfig
from ..result import ErrorKind

API_VERSION = "v1beta"


class GeminiError(RuntimeError):
    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class GenerativeModelError(GeminiError):
    pass


class FileStoreError(GeminiError):
    pass


def _kind_for_status(status_code: int) -> ErrorKind:
    # The Files API answers 403 for names that do not exist under this key.
    if status_code in {403, 404}:
        return ErrorKind.NOT_FOUND
    return ErrorKind.REMOTE_UNAVAILABLE


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return resp.text[:200]


class GeminiHttpClient:
    """Thin wrapper over a ``requests.Session`` bound to one API key."""

    error_cls = GeminiError

    def __init__(self, config: GeminiConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session or requests.Session()

    def url(self, path: str, upload: bool = False) -> str:
        prefix = f"upload/{API_VERSION}" if upload else API_VERSION
        return f"{self.config.api_base}/{prefix}/{path.lstrip('/')}"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        if not self.config.api_key:
            raise self.error_cls(ErrorKind.REMOTE_UNAVAILABLE, "Gemini API key not configured")
        headers = {"x-goog-api-key": self.config.api_key}
        if extra:
            headers.update(extra)
        return headers

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> requests.Response:
        merged = self._headers(headers)
        try:
            resp = self.session.request(method, url, headers=merged, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as exc:
            raise self.error_cls(ErrorKind.REMOTE_UNAVAILABLE, f"{method} {url} failed: {exc}") from exc
        if resp.status_code >= 400:
            detail = _error_detail(resp)
            raise self.error_cls(
                _kind_for_status(resp.status_code),
                f"{method} {url} returned {resp.status_code}: {detail}",
                status_code=resp.status_code,
            )
        return resp

    def request_json(self, method: str, url: str, **kwargs) -> Dict:
        resp = self.request(method, url, **kwargs)
        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError as exc:
            raise self.error_cls(ErrorKind.INVALID_RESPONSE, f"{method} {url} returned non-JSON body") from exc
        if not isinstance(data, dict):
            raise self.error_cls(ErrorKind.INVALID_RESPONSE, f"{method} {url} returned non-object JSON")
        return data

    def close(self) -> None:
        self.session.close()
