"""Environment-backed driver configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path


def _to_bool(value: str | None, default: bool = False) -> bool:
    """Convert common env var truthy/falsy values into booleans."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


@dataclass(slots=True)
class DriverConfig:
    """Runtime settings loaded from config files and environment variables."""

    tool_path: str | None
    tool_name: str | None
    use_host_compiler_if_available: bool
    force_external_tool: bool
    log_dir: str | None
    timeout: float | None
    working_directory: str | None

    @classmethod
    def from_env(cls) -> DriverConfig:
        file_config = _load_preferred_file_config()

        return cls(
            tool_path=(
                os.getenv("VBCDRIVER_TOOL_PATH")
                or _to_optional_string(file_config.get("tool_path"))
            ),
            tool_name=(
                os.getenv("VBCDRIVER_TOOL_NAME")
                or _to_optional_string(file_config.get("tool_name"))
            ),
            use_host_compiler_if_available=_to_bool(
                os.getenv("VBCDRIVER_USE_HOST_COMPILER"),
                default=bool(file_config.get("use_host_compiler_if_available", False)),
            ),
            force_external_tool=_to_bool(
                os.getenv("VBCDRIVER_FORCE_EXTERNAL_TOOL"),
                default=bool(file_config.get("force_external_tool", False)),
            ),
            log_dir=(
                os.getenv("VBCDRIVER_LOG_DIR")
                or _to_optional_string(file_config.get("log_dir"))
            ),
            timeout=_to_positive_float(
                os.getenv("VBCDRIVER_TIMEOUT") or file_config.get("timeout"),
            ),
            working_directory=(
                os.getenv("VBCDRIVER_CWD")
                or _to_optional_string(file_config.get("cwd"))
            ),
        )


def _to_optional_string(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _load_file_config(path_value: str) -> dict[str, object]:
    path = Path(path_value)
    if not path.exists() or not path.is_file():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            parsed = json.load(fh)
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(parsed, dict):
        return parsed
    return {}


def _load_preferred_file_config() -> dict[str, object]:
    explicit_path = os.getenv("VBCDRIVER_CONFIG_FILE")
    if explicit_path:
        return _load_file_config(explicit_path)

    shared_config = _load_file_config("vbcdriver.config.json")
    local_override = _load_file_config("vbcdriver.config.local.json")
    return {**shared_config, **local_override}


def _to_positive_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if parsed > 0 else None
    return None
