from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

BASE_DIR = Path(__file__).parent
API_KEY_ENV = "GOOGLE_API_KEY"


def _load_dotenv() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    candidates = [repo_root / ".env", Path.cwd() / ".env"]
    for env_path in candidates:
        if not env_path.exists():
            continue
        try:
            for line in env_path.read_text().splitlines():
                stripped = line.strip()
                if not stripped or stripped.startswith("#") or "=" not in stripped:
                    continue
                key, value = stripped.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                if key and key not in os.environ:
                    os.environ[key] = value
        except Exception:  # noqa: BLE001
            continue
        break


_load_dotenv()


@dataclass(frozen=True)
class GeminiConfig:
    api_key: Optional[str] = os.getenv(API_KEY_ENV)
    model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash").strip()
    api_base: str = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com").rstrip("/")
    timeout: float = float(os.getenv("GEMINI_TIMEOUT", "60"))


@dataclass(frozen=True)
class UploadConfig:
    uploads_dir: Path = Path(os.getenv("FORM_RESPONDER_UPLOADS_DIR", str(BASE_DIR / "uploads")))
    # The remote store is told every upload is a PDF, whatever the extension.
    mime_type: str = "application/pdf"
    list_page_size: int = 100


@dataclass(frozen=True)
class AnswerConfig:
    language: str = os.getenv("FORM_RESPONDER_ANSWER_LANGUAGE", "Spanish")


@dataclass(frozen=True)
class AppConfig:
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    answer: AnswerConfig = field(default_factory=AnswerConfig)


CONFIG = AppConfig()
