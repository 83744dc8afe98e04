"""Load, validate, and resolve switchboard.yaml configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from switchboard.config.models import SwitchboardConfig

DEFAULT_CONFIG_NAME = "switchboard.yaml"

#: Environment variable -> agent setting.  Environment wins over the file.
_ENV_OVERRIDES = {
    "AGENT_BACKEND": "backend",
    "AGENT_MODEL": "model",
    "WORKSPACE_PATH": "workdir",
    "SKIP_PERMISSIONS": "skip_permissions",
    "TIMEOUT_MS": "timeout",
    "COMMANDS_FILE": "commands_file",
}

_PATH_FIELDS = ("workdir", "commands_file")


class ConfigError(Exception):
    """User-facing configuration error."""


def load_config(path: Path | None = None) -> SwitchboardConfig:
    """Load and validate switchboard configuration.

    Args:
        path: Explicit config file path. If None, uses switchboard.yaml in
              the current directory when present, defaults otherwise.

    Returns:
        A validated SwitchboardConfig instance.

    Raises:
        ConfigError: On missing explicit file, bad YAML, bad environment
            value, or validation failure.
    """
    config_path = _resolve_path(path)
    if config_path is not None:
        raw = _read_yaml(config_path)
        base_dir = config_path.parent
    else:
        raw = {}
        base_dir = Path.cwd()
    _load_env(base_dir)
    agent = raw.setdefault("agent", {})
    if not isinstance(agent, dict):
        msg = f"Expected 'agent' to be a mapping, got {type(agent).__name__}"
        raise ConfigError(msg)
    _apply_env_overrides(agent)
    _resolve_paths(agent, base_dir)
    return _validate(raw)


def _resolve_path(path: Path | None) -> Path | None:
    if path is not None:
        resolved = Path(path)
        if not resolved.is_file():
            msg = f"Config file not found: {resolved}"
            raise ConfigError(msg)
        return resolved

    default = Path.cwd() / DEFAULT_CONFIG_NAME
    return default if default.is_file() else None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read config file: {exc}"
        raise ConfigError(msg) from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        detail = ""
        if hasattr(exc, "problem_mark") and exc.problem_mark is not None:
            mark = exc.problem_mark
            detail = f" (line {mark.line + 1}, column {mark.column + 1})"
        msg = f"Invalid YAML in {path.name}{detail}"
        raise ConfigError(msg) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {path.name}, got {type(data).__name__}"
        raise ConfigError(msg)

    return data


def _load_env(config_dir: Path) -> None:
    env_path = config_dir / ".env"
    if env_path.is_file():
        load_dotenv(env_path)


def _apply_env_overrides(agent: dict[str, Any]) -> None:
    for var, field in _ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        if field == "skip_permissions":
            agent[field] = value.strip().lower() == "true"
        elif field == "timeout":
            try:
                agent[field] = int(value) / 1000
            except ValueError:
                msg = f"{var} must be an integer number of milliseconds, got {value!r}"
                raise ConfigError(msg) from None
        else:
            agent[field] = value


def _resolve_paths(agent: dict[str, Any], base_dir: Path) -> None:
    for field in _PATH_FIELDS:
        value = agent.get(field)
        if isinstance(value, str) and value:
            candidate = Path(value).expanduser()
            if not candidate.is_absolute():
                candidate = base_dir / candidate
            agent[field] = candidate


def _validate(raw: dict[str, Any]) -> SwitchboardConfig:
    try:
        return SwitchboardConfig.model_validate(raw)
    except ValidationError as exc:
        parts: list[str] = []
        for err in exc.errors():
            loc = " → ".join(str(s) for s in err["loc"])
            msg = err["msg"]
            if "field required" in msg.lower():
                msg = "This field is required"
            elif "input should be" in msg.lower():
                msg = f"Invalid value: {msg}"
            parts.append(f"  {loc}: {msg}")
        joined = "\n".join(parts)
        msg = f"Config validation failed:\n{joined}"
        raise ConfigError(msg) from exc
