"""Credential helpers for the upstream providers (OpenRouter, fal, GitHub)."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_OPENROUTER_MODEL = "anthropic/claude-3.5-sonnet"
DEFAULT_FAL_BASE_URL = "https://fal.run"
DEFAULT_FAL_QUEUE_URL = "https://queue.fal.run"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_X_TITLE = "The Goat"
DEFAULT_CONFIG_PATH = Path("config/credentials.json")


def load_provider_credentials(path: str | Path | None = None) -> dict[str, Any]:
    """Load provider credentials from ENV and an optional JSON file.

    Resolution order for each setting is: ENV -> JSON config -> defaults.
    The file is optional. Missing keys resolve to empty strings so the API can
    boot and answer with controlled "not configured" errors.

    JSON layout::

        {
          "openrouter": {"api_key": "...", "model": "...", "base_url": "..."},
          "fal": {"api_key": "..."},
          "github": {"status_token": "...", "dispatch_token": "..."},
          "build_trigger_secret": "...",
          "timeout_s": 30
        }
    """

    raw_path = str(path).strip() if path is not None else os.getenv("GOAT_CREDENTIALS_FILE", "").strip()
    config_path = Path(raw_path).expanduser() if raw_path else DEFAULT_CONFIG_PATH

    config_data: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as file_handle:
            raw_data = json.load(file_handle)
        if not isinstance(raw_data, dict):
            raise ValueError("Credentials file must contain a JSON object")
        config_data = raw_data

    openrouter = _section(config_data, "openrouter")
    fal = _section(config_data, "fal")
    github = _section(config_data, "github")

    timeout_value = float(
        _coalesce(os.getenv("GOAT_HTTP_TIMEOUT_S"), config_data.get("timeout_s"), DEFAULT_TIMEOUT_S)
    )
    if timeout_value <= 0:
        raise ValueError("timeout_s must be greater than zero")

    return {
        "openrouter_api_key": _text(os.getenv("OPENROUTER_KEY"), openrouter.get("api_key"), ""),
        "openrouter_model": _text(
            os.getenv("OPENROUTER_MODEL"), openrouter.get("model"), DEFAULT_OPENROUTER_MODEL
        ),
        "openrouter_base_url": _text(
            os.getenv("OPENROUTER_BASE_URL"), openrouter.get("base_url"), DEFAULT_OPENROUTER_BASE_URL
        ),
        "openrouter_title": _text(os.getenv("OPENROUTER_X_TITLE"), openrouter.get("x_title"), DEFAULT_X_TITLE),
        "fal_api_key": _text(os.getenv("FAL_KEY"), fal.get("api_key"), ""),
        "fal_base_url": _text(os.getenv("FAL_BASE_URL"), fal.get("base_url"), DEFAULT_FAL_BASE_URL),
        "fal_queue_url": _text(os.getenv("FAL_QUEUE_URL"), fal.get("queue_url"), DEFAULT_FAL_QUEUE_URL),
        "github_status_token": _text(os.getenv("GH_PAT"), github.get("status_token"), ""),
        "github_dispatch_token": _text(os.getenv("GITHUB_TOKEN"), github.get("dispatch_token"), ""),
        "github_api_url": _text(os.getenv("GITHUB_API_URL"), github.get("api_url"), DEFAULT_GITHUB_API_URL),
        "build_trigger_secret": _text(
            os.getenv("BUILD_TRIGGER_SECRET"), config_data.get("build_trigger_secret"), ""
        ),
        "timeout_s": timeout_value,
        "credentials_path": str(config_path),
    }


def _section(config_data: dict[str, Any], name: str) -> dict[str, Any]:
    section = config_data.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"Credentials section '{name}' must be a JSON object")
    return section


def _text(*values: Any) -> str:
    return str(_coalesce(*values)).strip()


def _coalesce(*values: Any) -> Any:
    """Return first non-empty value, preserving falsy numerics such as 0."""
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and value.strip() == "":
            continue
        return value
    return ""
