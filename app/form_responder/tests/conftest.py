import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from form_responder.clients.http import FileStoreError, GenerativeModelError  # noqa: E402
from form_responder.result import ErrorKind  # noqa: E402


FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"
LOCAL_FORM_PATH = FIXTURES_DIR / "form.html"


class FakeModelClient:
    """Returns queued texts (or raises queued errors) in call order."""

    def __init__(self, responses: Optional[List[object]] = None) -> None:
        self.responses = list(responses or [])
        self.calls: List[Dict[str, object]] = []

    def generate_content(self, parts, generation_config, system_instruction=None) -> str:
        self.calls.append(
            {
                "parts": parts,
                "generation_config": generation_config,
                "system_instruction": system_instruction,
            }
        )
        if not self.responses:
            raise GenerativeModelError(ErrorKind.REMOTE_UNAVAILABLE, "no scripted response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        pass


class FakeFileStore:
    """In-memory stand-in for the Files API keyed by canonical name."""

    def __init__(self) -> None:
        self.files: Dict[str, Dict] = {}
        self.deleted: List[str] = []
        self.uploads: List[Dict[str, object]] = []
        self.fail_with: Optional[FileStoreError] = None
        self.fail_delete_for: set = set()
        self._counter = 0

    def add(self, name: str, display_name: str) -> Dict:
        record = {
            "name": name,
            "displayName": display_name,
            "uri": f"https://generativelanguage.googleapis.com/v1beta/{name}",
            "mimeType": "application/pdf",
            "state": "ACTIVE",
        }
        self.files[name] = record
        return record

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def get_file(self, file_id: str) -> Dict:
        self._check()
        name = file_id if file_id.startswith("files/") else f"files/{file_id}"
        if name not in self.files:
            raise FileStoreError(ErrorKind.NOT_FOUND, f"{name} not found", status_code=404)
        return self.files[name]

    def iter_all_files(self, page_size: int = 100) -> List[Dict]:
        self._check()
        return list(self.files.values())

    def delete_file(self, name: str) -> None:
        self._check()
        if name in self.fail_delete_for:
            raise FileStoreError(ErrorKind.REMOTE_UNAVAILABLE, "delete failed", status_code=500)
        self.files.pop(name, None)
        self.deleted.append(name)

    def upload_file(self, path: Path, mime_type: str, display_name: str) -> Dict:
        self._check()
        self.uploads.append(
            {
                "path": Path(path),
                "mime_type": mime_type,
                "display_name": display_name,
                "content": Path(path).read_bytes(),
            }
        )
        self._counter += 1
        return self.add(f"files/upload{self._counter}", display_name)

    def close(self) -> None:
        pass


@pytest.fixture
def fake_model() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def fake_store() -> FakeFileStore:
    return FakeFileStore()


@pytest.fixture(scope="session")
def form_fixture_html() -> str:
    if not LOCAL_FORM_PATH.exists():
        pytest.fail(f"Local form fixture missing at {LOCAL_FORM_PATH}")
    return LOCAL_FORM_PATH.read_text()
