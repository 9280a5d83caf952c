from __future__ import annotations

import logging
from typing import Dict, List

from pydantic import ValidationError

from .clients.file_store import FileStoreClient, looks_like_file_id
from .clients.http import FileStoreError
from .config import CONFIG
from .result import Err, ErrorKind, Ok, Result
from .schemas import DeleteAllSummary, LocalFileInfo, RemoteFileRecord

LOGGER = logging.getLogger(__name__)


def _to_record(raw: Dict) -> RemoteFileRecord:
    try:
        return RemoteFileRecord.model_validate(raw)
    except ValidationError as exc:
        raise FileStoreError(ErrorKind.INVALID_RESPONSE, f"Unexpected file record: {exc}") from exc


def _err(exc: FileStoreError) -> Err:
    return Err(exc.kind, str(exc))


def _find_by_display_name(display_name: str, store: FileStoreClient) -> Result[RemoteFileRecord]:
    listed = list_all(store)
    if not listed.ok:
        return listed
    matches = [record for record in listed.value if record.display_name == display_name]
    if not matches:
        return Err(ErrorKind.NOT_FOUND, f"No file named {display_name}")
    if len(matches) > 1:
        names = [record.name for record in matches]
        return Err(ErrorKind.AMBIGUOUS, f"Display name {display_name} matches {len(matches)} files", {"names": names})
    return Ok(matches[0])


def fetch_by_name(file_id: str, store: FileStoreClient) -> Result[RemoteFileRecord]:
    """Resolve a canonical id (``abc`` or ``files/abc``) or, failing that, a display name."""
    if looks_like_file_id(file_id):
        try:
            record = _to_record(store.get_file(file_id))
        except FileStoreError as exc:
            if exc.kind != ErrorKind.NOT_FOUND:
                LOGGER.error("Error retrieving file %s: %s", file_id, exc)
                return _err(exc)
        else:
            LOGGER.info("Retrieved file %s as %s", record.display_name, record.uri)
            return Ok(record)

    found = _find_by_display_name(file_id, store)
    if not found.ok:
        LOGGER.error("Error retrieving file %s: %s", file_id, found.message)
        return found
    LOGGER.info("Retrieved file %s as %s", file_id, found.value.uri)
    return found


def list_all(store: FileStoreClient) -> Result[List[RemoteFileRecord]]:
    try:
        raw_files = store.iter_all_files(page_size=CONFIG.upload.list_page_size)
        records = [_to_record(raw) for raw in raw_files]
    except FileStoreError as exc:
        LOGGER.error("Error listing files: %s", exc)
        return _err(exc)
    LOGGER.info("Listed %d remote files", len(records))
    return Ok(records)


def delete_by_name(file_id: str, store: FileStoreClient) -> Result[RemoteFileRecord]:
    # Deletion needs the canonical name, so resolve the caller's id first.
    found = fetch_by_name(file_id, store)
    if not found.ok:
        return found
    record = found.value
    try:
        store.delete_file(record.name)
    except FileStoreError as exc:
        LOGGER.error("Error deleting file %s: %s", file_id, exc)
        return _err(exc)
    LOGGER.info("Deleted file %s (%s)", file_id, record.name)
    return Ok(record)


def delete_all(store: FileStoreClient) -> Result[DeleteAllSummary]:
    listed = list_all(store)
    if not listed.ok:
        return listed
    summary = DeleteAllSummary()
    for record in listed.value:
        outcome = delete_by_name(record.name, store)
        if outcome.ok:
            summary.deleted.append(record.name)
        else:
            summary.failed.append(record.name)
    LOGGER.info("Deleted %d files, %d failed", len(summary.deleted), len(summary.failed))
    return Ok(summary)


def upload(local_file: LocalFileInfo, store: FileStoreClient) -> Result[RemoteFileRecord]:
    try:
        record = _to_record(
            store.upload_file(
                local_file.path,
                mime_type=CONFIG.upload.mime_type,
                display_name=local_file.filename,
            )
        )
    except FileStoreError as exc:
        LOGGER.error("Error uploading file %s: %s", local_file.filename, exc)
        return _err(exc)
    except OSError as exc:
        LOGGER.error("Error reading staged file %s: %s", local_file.path, exc)
        return Err(ErrorKind.NOT_FOUND, f"Staged file unreadable: {exc}")
    LOGGER.info("Uploaded file %s as %s", local_file.filename, record.uri)
    return Ok(record)
