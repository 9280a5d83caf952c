from __future__ import annotations

import json
from typing import Dict, List, Optional

import pytest
import requests

from form_responder.clients.file_store import FileStoreClient, canonical_file_name, looks_like_file_id
from form_responder.clients.gemini import GenerativeModelClient, text_part
from form_responder.clients.http import FileStoreError, GenerativeModelError
from form_responder.config import GeminiConfig
from form_responder.pipeline.response_schema import GenerationConfig, string_array
from form_responder.result import ErrorKind

BASE = "https://gemini.test"


def _response(status: int = 200, body: Optional[object] = None, headers: Optional[Dict[str, str]] = None):
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode() if body is not None else b""
    resp.headers.update(headers or {})
    return resp


class FakeSession:
    def __init__(self, responses: List[object]) -> None:
        self.responses = list(responses)
        self.calls: List[Dict[str, object]] = []

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "headers": headers, "timeout": timeout, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        pass


def _config(api_key: Optional[str] = "test-key") -> GeminiConfig:
    return GeminiConfig(api_key=api_key, model="gemini-1.5-flash", api_base=BASE, timeout=5.0)


def test_canonical_file_name() -> None:
    assert canonical_file_name("abc") == "files/abc"
    assert canonical_file_name("files/abc") == "files/abc"


def test_looks_like_file_id() -> None:
    assert looks_like_file_id("abc-123")
    assert looks_like_file_id("files/abc")
    assert not looks_like_file_id("1700000000000-1a2b3c4d.pdf")
    assert not looks_like_file_id("Report")


def test_generate_content_payload_and_text() -> None:
    body = {"candidates": [{"content": {"parts": [{"text": '["30"]'}]}, "finishReason": "STOP"}]}
    session = FakeSession([_response(body=body)])
    client = GenerativeModelClient(_config(), session=session)

    text = client.generate_content(
        [text_part("hola")],
        GenerationConfig(response_schema=string_array()),
        system_instruction="be brief",
    )
    assert text == '["30"]'
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == f"{BASE}/v1beta/models/gemini-1.5-flash:generateContent"
    assert call["headers"]["x-goog-api-key"] == "test-key"
    assert call["timeout"] == 5.0
    payload = call["json"]
    assert payload["contents"] == [{"role": "user", "parts": [{"text": "hola"}]}]
    assert payload["systemInstruction"] == {"parts": [{"text": "be brief"}]}
    assert payload["generationConfig"]["responseMimeType"] == "application/json"


def test_generate_content_without_candidates_is_invalid() -> None:
    session = FakeSession([_response(body={"promptFeedback": {"blockReason": "SAFETY"}})])
    client = GenerativeModelClient(_config(), session=session)
    with pytest.raises(GenerativeModelError) as excinfo:
        client.generate_content([text_part("x")], GenerationConfig(response_schema=string_array()))
    assert excinfo.value.kind == ErrorKind.INVALID_RESPONSE
    assert "SAFETY" in str(excinfo.value)


def test_missing_api_key_fails_before_network() -> None:
    session = FakeSession([])
    client = GenerativeModelClient(_config(api_key=None), session=session)
    with pytest.raises(GenerativeModelError) as excinfo:
        client.generate_content([text_part("x")], GenerationConfig(response_schema=string_array()))
    assert excinfo.value.kind == ErrorKind.REMOTE_UNAVAILABLE
    assert session.calls == []


def test_transport_errors_are_remote_unavailable() -> None:
    session = FakeSession([requests.ConnectionError("refused")])
    client = FileStoreClient(_config(), session=session)
    with pytest.raises(FileStoreError) as excinfo:
        client.get_file("abc")
    assert excinfo.value.kind == ErrorKind.REMOTE_UNAVAILABLE


@pytest.mark.parametrize(
    "status,kind",
    [(404, ErrorKind.NOT_FOUND), (403, ErrorKind.NOT_FOUND), (500, ErrorKind.REMOTE_UNAVAILABLE)],
)
def test_http_status_mapping(status: int, kind: ErrorKind) -> None:
    session = FakeSession([_response(status, {"error": {"message": "nope"}})])
    client = FileStoreClient(_config(), session=session)
    with pytest.raises(FileStoreError) as excinfo:
        client.get_file("abc")
    assert excinfo.value.kind == kind
    assert excinfo.value.status_code == status
    assert "nope" in str(excinfo.value)
    assert session.calls[0]["url"] == f"{BASE}/v1beta/files/abc"


def test_list_follows_page_tokens() -> None:
    session = FakeSession(
        [
            _response(body={"files": [{"name": "files/a"}], "nextPageToken": "t1"}),
            _response(body={"files": [{"name": "files/b"}]}),
        ]
    )
    client = FileStoreClient(_config(), session=session)
    files = client.iter_all_files(page_size=1)
    assert [f["name"] for f in files] == ["files/a", "files/b"]
    assert session.calls[0]["params"] == {"pageSize": 1}
    assert session.calls[1]["params"] == {"pageSize": 1, "pageToken": "t1"}


def test_list_of_empty_store() -> None:
    session = FakeSession([_response(body={})])
    client = FileStoreClient(_config(), session=session)
    assert client.iter_all_files() == []


def test_delete_uses_canonical_name() -> None:
    session = FakeSession([_response(body={})])
    client = FileStoreClient(_config(), session=session)
    client.delete_file("abc")
    assert session.calls[0]["method"] == "DELETE"
    assert session.calls[0]["url"] == f"{BASE}/v1beta/files/abc"


def test_resumable_upload(tmp_path) -> None:
    staged = tmp_path / "1700000000000.pdf"
    staged.write_bytes(b"%PDF-1.4")
    record = {"name": "files/xyz", "uri": f"{BASE}/v1beta/files/xyz", "displayName": staged.name}
    session = FakeSession(
        [
            _response(headers={"X-Goog-Upload-URL": f"{BASE}/upload/session/1"}),
            _response(body={"file": record}),
        ]
    )
    client = FileStoreClient(_config(), session=session)
    result = client.upload_file(staged, mime_type="application/pdf", display_name=staged.name)
    assert result == record

    start, finalize = session.calls
    assert start["url"] == f"{BASE}/upload/v1beta/files"
    assert start["headers"]["X-Goog-Upload-Command"] == "start"
    assert start["headers"]["X-Goog-Upload-Header-Content-Length"] == "8"
    assert start["headers"]["X-Goog-Upload-Header-Content-Type"] == "application/pdf"
    assert start["json"] == {"file": {"display_name": staged.name}}
    assert finalize["url"] == f"{BASE}/upload/session/1"
    assert finalize["headers"]["X-Goog-Upload-Command"] == "upload, finalize"
    assert finalize["data"] == b"%PDF-1.4"


def test_upload_without_session_url_is_invalid(tmp_path) -> None:
    staged = tmp_path / "a.pdf"
    staged.write_bytes(b"x")
    session = FakeSession([_response()])
    client = FileStoreClient(_config(), session=session)
    with pytest.raises(FileStoreError) as excinfo:
        client.upload_file(staged, mime_type="application/pdf", display_name="a.pdf")
    assert excinfo.value.kind == ErrorKind.INVALID_RESPONSE
