from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

from domain.models import AppConfig, AutomationConfig
from domain.utils import split_csv

_INT_KEYS = ("NAVIGATION_TIMEOUT_MS", "ADVANCE_TIMEOUT_MS", "MAX_QUESTION_ROUNDS", "TYPING_DELAY_MS")
_ENV_OVERRIDES = ("PORT", "BROWSER_EXECUTABLE_PATH")
_KNOWN_KEYS = {
    "START_URL",
    "HEADLESS",
    "BROWSER_EXECUTABLE_PATH",
    "PAUSE_SCALE",
    "JOB_URL_TEMPLATE",
    "HOST",
    "PORT",
    "DB_PATH",
    "CORS_ORIGINS",
    *_INT_KEYS,
}


class FileSystemConfigProvider:
    """Reads config.json from a config directory.

    The file is optional; missing keys fall back to the defaults on
    ``AppConfig``/``AutomationConfig``. ``PORT`` and
    ``BROWSER_EXECUTABLE_PATH`` environment variables win over the file.
    Every public method re-reads from disk so that edits take effect
    without restarting the app.
    """

    def __init__(self, config_dir: str, *, environ: Mapping[str, str] | None = None) -> None:
        self._config_dir = Path(config_dir)
        self._environ = os.environ if environ is None else environ

    @property
    def config_path(self) -> Path:
        return self._config_dir / "config.json"

    def validate(self) -> list[str]:
        errors: list[str] = []
        try:
            data = self._read_settings()
        except (json.JSONDecodeError, OSError) as exc:
            return [f"Cannot read {self.config_path}: {exc}"]
        if not isinstance(data, dict):
            return [f"{self.config_path.name} must contain a JSON object"]

        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            errors.append(f"{self.config_path.name} has unknown keys: {', '.join(sorted(unknown))}")

        start_url = data.get("START_URL")
        if start_url is not None and not str(start_url).startswith("https://"):
            errors.append("START_URL must start with 'https://'.")

        headless = data.get("HEADLESS")
        if headless is not None and not isinstance(headless, bool):
            errors.append("HEADLESS must be a boolean (true/false), not a string.")

        for key in _INT_KEYS:
            value = data.get(key)
            if value is not None and (not _is_int(value) or int(value) < 0):
                errors.append(f"{key} must be a non-negative integer.")
        for key in ("NAVIGATION_TIMEOUT_MS", "ADVANCE_TIMEOUT_MS"):
            value = data.get(key)
            if value is not None and _is_int(value) and int(value) == 0:
                errors.append(f"{key} must be greater than zero.")

        pause_scale = data.get("PAUSE_SCALE")
        if pause_scale is not None:
            try:
                if float(pause_scale) < 0:
                    errors.append("PAUSE_SCALE must not be negative.")
            except (TypeError, ValueError):
                errors.append("PAUSE_SCALE must be a number.")

        template = data.get("JOB_URL_TEMPLATE")
        if template is not None and "{job_id}" not in str(template):
            errors.append("JOB_URL_TEMPLATE must contain '{job_id}'.")

        port = data.get("PORT")
        if port is not None and (not _is_int(port) or not 0 < int(port) < 65536):
            errors.append(f"PORT '{port}' is not a valid TCP port.")

        origins = data.get("CORS_ORIGINS")
        if origins is not None and not isinstance(origins, (list, str)):
            errors.append("CORS_ORIGINS must be a list or a comma-separated string.")

        return errors

    def get_config(self) -> AppConfig:
        data = self._read_settings()
        defaults = AutomationConfig()
        automation = AutomationConfig(
            start_url=str(data.get("START_URL", defaults.start_url)),
            headless=bool(data.get("HEADLESS", defaults.headless)),
            executable_path=data.get("BROWSER_EXECUTABLE_PATH") or None,
            navigation_timeout_ms=int(data.get("NAVIGATION_TIMEOUT_MS", defaults.navigation_timeout_ms)),
            advance_timeout_ms=int(data.get("ADVANCE_TIMEOUT_MS", defaults.advance_timeout_ms)),
            max_question_rounds=int(data.get("MAX_QUESTION_ROUNDS", defaults.max_question_rounds)),
            typing_delay_ms=int(data.get("TYPING_DELAY_MS", defaults.typing_delay_ms)),
            pause_scale=float(data.get("PAUSE_SCALE", defaults.pause_scale)),
            job_url_template=str(data.get("JOB_URL_TEMPLATE", defaults.job_url_template)),
        )
        app_defaults = AppConfig()
        return AppConfig(
            automation=automation,
            host=str(data.get("HOST", app_defaults.host)),
            port=int(data.get("PORT", app_defaults.port)),
            db_path=str(data.get("DB_PATH", app_defaults.db_path)),
            cors_origins=_split_origins(data.get("CORS_ORIGINS", app_defaults.cors_origins)),
        )

    # -- internal helpers ---------------------------------------------------

    def _read_settings(self) -> Any:
        data: Any = {}
        if self.config_path.is_file():
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                return data
            data = dict(data)
        for key in _ENV_OVERRIDES:
            value = self._environ.get(key)
            if value:
                data[key] = value
        return data


def _is_int(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.strip().isdigit()


def _split_origins(raw: object) -> tuple[str, ...]:
    if isinstance(raw, str):
        return split_csv(raw)
    return tuple(str(item) for item in raw)  # type: ignore[union-attr]
