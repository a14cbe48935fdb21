from __future__ import annotations

import os
from typing import Any, Dict


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def get_settings() -> Dict[str, Any]:
    allowed_raw = os.getenv("ALLOWED_ORIGINS", "*")
    allowed_list = [o.strip() for o in allowed_raw.split(",") if o.strip()]
    return {
        "database_url": os.getenv("DATABASE_URL", "sqlite:///./dev.db"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "allowed_origins": allowed_list,
        "allow_origin_regex": os.getenv("ALLOWED_ORIGIN_REGEX", None),
        "auth_bypass": _env_bool("AUTH_BYPASS"),
        "firebase_project_id": os.getenv("FIREBASE_PROJECT_ID"),
        # Google Document AI
        "google_project_id": os.getenv("GOOGLE_CLOUD_PROJECT_ID"),
        "google_processor_id": os.getenv("GOOGLE_CLOUD_W2_PROCESSOR_ID"),
        "google_location": os.getenv("GOOGLE_CLOUD_LOCATION", "us"),
        "google_credentials_json": os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON"),
        "google_credentials_file": os.getenv("GOOGLE_APPLICATION_CREDENTIALS"),
        "credentials_dir": os.getenv("CREDENTIALS_DIR", "/tmp/credentials"),
        "document_ai_timeout": float(os.getenv("DOCUMENT_AI_TIMEOUT_SECONDS", "30")),
        # Remote LLM extractor
        "llm_endpoint": os.getenv("LLM_EXTRACTION_ENDPOINT"),
        "llm_api_key": os.getenv("LLM_EXTRACTION_API_KEY"),
        "http_timeout": int(os.getenv("LLM_HTTP_TIMEOUT", "60")),
        # Retry policy around both providers
        "extraction_max_attempts": int(os.getenv("EXTRACTION_MAX_ATTEMPTS", "3")),
        "extraction_backoff_seconds": float(os.getenv("EXTRACTION_BACKOFF_SECONDS", "1.0")),
        "extraction_backoff_factor": float(os.getenv("EXTRACTION_BACKOFF_FACTOR", "2.0")),
        "default_provider": os.getenv("EXTRACTION_PROVIDER", "google"),
    }
