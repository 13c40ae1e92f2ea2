"""
Bootstrap environment for Streamlit Cloud & local dev:
- Flatten st.secrets into uppercase os.environ keys (nested -> PREFIX_CHILD)
- If GOOGLE_CREDENTIALS_JSON is provided in secrets (dict or JSON string),
  write it to a temp file and point GOOGLE_APPLICATION_CREDENTIALS at it
- Finally, load .env (without overriding existing env vars)
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from typing import Any, Iterator, Mapping, Tuple

import streamlit as st
from dotenv import load_dotenv

CREDENTIALS_FILE_NAME = "student-dashboard-credentials.json"


def _sanitize_key(key: str) -> str:
    return re.sub(r"[^A-Za-z0-9_]", "_", key.upper())


def _flatten(prefix: str, value: Any) -> Iterator[Tuple[str, str]]:
    if isinstance(value, Mapping):
        for child_key, child_value in value.items():
            yield from _flatten(f"{prefix}_{child_key}", child_value)
    else:
        yield _sanitize_key(prefix), str(value)


def _secrets_as_dict() -> dict:
    # st.secrets raises when no secrets.toml exists outside Cloud
    try:
        secrets = getattr(st, "secrets", None)
        if not secrets:
            return {}
        try:
            return secrets.to_dict()  # type: ignore[attr-defined]
        except AttributeError:
            return dict(secrets)
    except Exception:
        return {}


def _bridge_secrets_to_env(secrets: Mapping[str, Any]) -> None:
    for key, value in secrets.items():
        if key == "GOOGLE_CREDENTIALS_JSON":
            continue
        for flat_key, flat_value in _flatten(key, value):
            os.environ.setdefault(flat_key, flat_value)


def _write_credentials(json_text: str) -> str:
    path = os.path.join(tempfile.gettempdir(), CREDENTIALS_FILE_NAME)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(json_text)
    return path


def _materialize_google_credentials(secrets: Mapping[str, Any]) -> None:
    """Expose service-account credentials from secrets as a file path.

    Only needed for the gspread source; the published CSV and local fallback
    sources work without it.
    """
    existing = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if existing and os.path.exists(existing):
        return

    creds = secrets.get("GOOGLE_CREDENTIALS_JSON")
    if isinstance(creds, Mapping):
        json_text = json.dumps(dict(creds))
    elif creds:
        json_text = str(creds)
    elif existing and existing.strip().startswith("{"):
        # Inline JSON placed directly in the path variable
        json_text = existing.strip()
    else:
        return

    try:
        json.loads(json_text)
    except ValueError:
        return
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = _write_credentials(json_text)


def ensure_env() -> None:
    """Idempotent: make sure env vars and creds are available.
    Safe to call multiple times, both inside and outside Streamlit runtime.
    """
    secrets = _secrets_as_dict()
    _bridge_secrets_to_env(secrets)
    _materialize_google_credentials(secrets)
    load_dotenv()


ensure_env()
