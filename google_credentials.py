"""Service-account credential lookup for the blob storage client."""
from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from google.auth.credentials import Credentials
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

_ENV_JSON_KEYS = (
    "GOOGLE_CREDENTIALS_JSON",
    "GOOGLE_APPLICATION_CREDENTIALS_JSON",
)
_SECRET_KEYS = ("gcp_service_account", "google_credentials")
_REQUIRED_FIELDS = {"type", "project_id", "private_key", "client_email"}
_DEFAULT_CREDENTIAL_FILE = Path("google-credential.json")


def _as_service_account_info(candidate: Any) -> dict[str, Any] | None:
    if isinstance(candidate, str):
        candidate = candidate.strip()
        if not candidate:
            return None
        try:
            candidate = json.loads(candidate)
        except ValueError:
            return None
    if not isinstance(candidate, Mapping):
        return None
    info = {str(key): value for key, value in candidate.items()}
    return info if _REQUIRED_FIELDS.issubset(info) else None


def _credential_file_candidates() -> list[Path]:
    candidates: list[Path] = []
    env_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if env_path:
        candidates.append(Path(env_path).expanduser())
    candidates.append(_DEFAULT_CREDENTIAL_FILE)
    return candidates


def _credentials_from_file() -> Credentials | None:
    for path in _credential_file_candidates():
        if not path.is_file():
            continue
        try:
            return service_account.Credentials.from_service_account_file(str(path))
        except (ValueError, OSError) as exc:
            logger.warning("Failed to load Google credentials from %s: %s", path, exc)
    return None


def _info_from_env() -> dict[str, Any] | None:
    for key in _ENV_JSON_KEYS:
        info = _as_service_account_info(os.getenv(key))
        if info:
            return info
    return None


def _info_from_streamlit_secrets() -> dict[str, Any] | None:
    import streamlit as st

    try:
        secrets = dict(st.secrets)
    except FileNotFoundError:
        return None
    for key in _SECRET_KEYS:
        info = _as_service_account_info(secrets.get(key))
        if info:
            return info
    return None


@lru_cache(maxsize=1)
def get_service_account_credentials() -> Credentials | None:
    """Return explicit service-account credentials, or None to use ADC."""

    credentials = _credentials_from_file()
    if credentials is not None:
        return credentials

    info = _info_from_env() or _info_from_streamlit_secrets()
    if not info:
        return None
    try:
        return service_account.Credentials.from_service_account_info(info)
    except ValueError as exc:
        logger.warning("Failed to construct Google credentials from mapping: %s", exc)
    return None


__all__ = ["get_service_account_credentials"]
