from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, Optional

import anyio
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import file_transfer
from .clients.file_store import FileStoreClient
from .clients.gemini import GenerativeModelClient
from .clients.http import GenerativeModelError
from .config import CONFIG
from .pipeline.answer import answer_questions
from .pipeline.form_extract import analyze_form
from .result import Err, HTTP_STATUS_BY_KIND
from .schemas import LocalFileInfo, ResponderRequest, UploadedFileHandle

UPLOADS_DIR = CONFIG.upload.uploads_dir

logging.basicConfig(level=CONFIG.log_level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
LOGGER = logging.getLogger("form_responder")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.model_client = GenerativeModelClient(CONFIG.gemini)
    app.state.file_store = FileStoreClient(CONFIG.gemini)
    if not CONFIG.gemini.api_key:
        LOGGER.warning("GOOGLE_API_KEY is not set; remote calls will fail")
    yield
    app.state.model_client.close()
    app.state.file_store.close()


app = FastAPI(title="Form Responder", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_model_client(request: Request) -> GenerativeModelClient:
    client = getattr(request.app.state, "model_client", None)
    if client is None:
        client = request.app.state.model_client = GenerativeModelClient(CONFIG.gemini)
    return client


def get_file_store(request: Request) -> FileStoreClient:
    store = getattr(request.app.state, "file_store", None)
    if store is None:
        store = request.app.state.file_store = FileStoreClient(CONFIG.gemini)
    return store


def _error_response(err: Err, status_code: Optional[int] = None) -> JSONResponse:
    return JSONResponse(err.payload(), status_code=status_code or HTTP_STATUS_BY_KIND[err.kind])


def _staged_filename(original: Optional[str]) -> str:
    suffix = Path(original or "").suffix.lower()
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{suffix}"


def _save_upload(upload: UploadFile) -> LocalFileInfo:
    UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
    filename = _staged_filename(upload.filename)
    path = UPLOADS_DIR / filename
    with path.open("wb") as f:
        f.write(upload.file.read())
    LOGGER.info("Staged upload %s as %s", upload.filename, path)
    return LocalFileInfo(filename=filename, path=path, mime_type=upload.content_type)


def _remove_staged(local_file: LocalFileInfo) -> Optional[str]:
    try:
        local_file.path.unlink()
    except OSError as exc:
        LOGGER.warning("Could not remove staged file %s: %s", local_file.path, exc)
        return str(exc)
    return None


@app.get("/health")
async def health() -> Dict[str, object]:
    return {
        "status": "ok",
        "model": CONFIG.gemini.model,
        "api_key_configured": bool(CONFIG.gemini.api_key),
    }


@app.post("/responder")
async def responder(
    payload: ResponderRequest,
    model: GenerativeModelClient = Depends(get_model_client),
):
    try:
        form_questions = await anyio.to_thread.run_sync(analyze_form, payload.form, model)
    except GenerativeModelError as exc:
        LOGGER.error("Form analysis failed: %s", exc)
        return JSONResponse(
            {"message": f"Error analyzing form: {exc}", "kind": exc.kind.value},
            status_code=500,
        )

    outcome = await anyio.to_thread.run_sync(
        answer_questions,
        form_questions,
        payload.context,
        model,
        payload.file_uri,
    )
    if not outcome.ok:
        return _error_response(outcome, status_code=500)
    return JSONResponse(outcome.value)


@app.post("/upload")
async def upload(
    file: UploadFile = File(None),
    store: FileStoreClient = Depends(get_file_store),
):
    if file is None:
        return JSONResponse({"message": "No file uploaded"}, status_code=400)

    local_file = _save_upload(file)
    outcome = await anyio.to_thread.run_sync(file_transfer.upload, local_file, store)
    cleanup_error = _remove_staged(local_file)
    if not outcome.ok:
        return _error_response(outcome, status_code=500)

    record = outcome.value
    handle = UploadedFileHandle(
        name=record.name,
        remote_uri=record.uri or "",
        local_filename=local_file.filename,
        mime_type=record.mime_type or CONFIG.upload.mime_type,
    )
    message = "Uploaded successfully"
    if cleanup_error:
        message = f"{message} (local copy not removed: {cleanup_error})"
    return JSONResponse({"message": message, "file": handle.to_payload()})


@app.delete("/delete/{file_id:path}")
async def delete(file_id: str, store: FileStoreClient = Depends(get_file_store)):
    outcome = await anyio.to_thread.run_sync(file_transfer.delete_by_name, file_id, store)
    if not outcome.ok:
        return _error_response(outcome)
    return JSONResponse({"message": "Deleted successfully"})


@app.delete("/deleteAll")
async def delete_all(store: FileStoreClient = Depends(get_file_store)):
    outcome = await anyio.to_thread.run_sync(file_transfer.delete_all, store)
    if not outcome.ok:
        return _error_response(outcome)
    summary = outcome.value
    return JSONResponse(
        {
            "message": f"Deleted {len(summary.deleted)} file(s)",
            "deleted": summary.deleted,
            "failed": summary.failed,
        }
    )


@app.get("/list")
async def list_files(store: FileStoreClient = Depends(get_file_store)):
    outcome = await anyio.to_thread.run_sync(file_transfer.list_all, store)
    if not outcome.ok:
        return _error_response(outcome)
    return JSONResponse([record.to_payload() for record in outcome.value])


@app.get("/file/{file_id:path}")
async def get_file(file_id: str, store: FileStoreClient = Depends(get_file_store)):
    outcome = await anyio.to_thread.run_sync(file_transfer.fetch_by_name, file_id, store)
    if not outcome.ok:
        return _error_response(outcome)
    return JSONResponse(outcome.value.to_payload())
