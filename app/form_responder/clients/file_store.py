from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional

from ..result import ErrorKind
from .http import FileStoreError, GeminiHttpClient

FILES_PREFIX = "files/"

# Remote ids are lowercase alphanumerics and dashes, at most 40 characters.
RE_FILE_ID = re.compile(r"^[a-z0-9-]{1,40}$")


def looks_like_file_id(file_id: str) -> bool:
    bare = file_id.strip()
    if bare.startswith(FILES_PREFIX):
        bare = bare[len(FILES_PREFIX):]
    return bool(RE_FILE_ID.match(bare))


def canonical_file_name(file_id: str) -> str:
    file_id = file_id.strip()
    if file_id.startswith(FILES_PREFIX):
        return file_id
    return FILES_PREFIX + file_id


class FileStoreClient(GeminiHttpClient):
    """REST calls against the Gemini Files API. Raises ``FileStoreError``."""

    error_cls = FileStoreError

    def get_file(self, file_id: str) -> Dict:
        return self.request_json("GET", self.url(canonical_file_name(file_id)))

    def list_files(self, page_size: int = 100, page_token: Optional[str] = None) -> Dict:
        params: Dict[str, object] = {"pageSize": page_size}
        if page_token:
            params["pageToken"] = page_token
        return self.request_json("GET", self.url("files"), params=params)

    def iter_all_files(self, page_size: int = 100) -> List[Dict]:
        files: List[Dict] = []
        token: Optional[str] = None
        while True:
            page = self.list_files(page_size=page_size, page_token=token)
            files.extend(page.get("files") or [])
            token = page.get("nextPageToken")
            if not token:
                return files

    def delete_file(self, name: str) -> None:
        self.request("DELETE", self.url(canonical_file_name(name)))

    def upload_file(self, path: Path, mime_type: str, display_name: str) -> Dict:
        data = Path(path).read_bytes()
        start = self.request(
            "POST",
            self.url("files", upload=True),
            headers={
                "X-Goog-Upload-Protocol": "resumable",
                "X-Goog-Upload-Command": "start",
                "X-Goog-Upload-Header-Content-Length": str(len(data)),
                "X-Goog-Upload-Header-Content-Type": mime_type,
                "Content-Type": "application/json",
            },
            json={"file": {"display_name": display_name}},
        )
        upload_url = start.headers.get("X-Goog-Upload-URL")
        if not upload_url:
            raise FileStoreError(ErrorKind.INVALID_RESPONSE, "Upload session did not return an upload URL")
        body = self.request_json(
            "POST",
            upload_url,
            headers={
                "Content-Length": str(len(data)),
                "X-Goog-Upload-Offset": "0",
                "X-Goog-Upload-Command": "upload, finalize",
            },
            data=data,
        )
        record = body.get("file")
        if not isinstance(record, dict):
            raise FileStoreError(ErrorKind.INVALID_RESPONSE, "Upload finalize returned no file record")
        return record
