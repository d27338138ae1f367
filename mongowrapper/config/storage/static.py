"""Static connection profile loader. Read-only; no business logic."""

import json
from pathlib import Path
from typing import Any

from mongowrapper.config.storage.models import ConnectionConfig

_config_dir = Path(__file__).resolve().parent
_config_path = _config_dir / "static.json"


def _load_raw_data(path: Path | None = None) -> dict[str, Any]:
    """Load raw JSON for active profile and profiles."""
    raw = (path or _config_path).read_text(encoding="utf-8")
    return json.loads(raw)


def load_connection_profiles(path: Path | None = None) -> dict[str, ConnectionConfig]:
    """Load connection profiles from static.json. Keys are profile names."""
    profiles = _load_raw_data(path).get("profiles", {})
    return {name: ConnectionConfig.model_validate(body) for name, body in profiles.items()}


def get_active_profile_name(path: Path | None = None) -> str:
    """Return the profile name marked as active in static.json. Defaults to 'local' if missing."""
    return _load_raw_data(path).get("active", "local")


def resolve_connection_config(
    profile_name: str,
    overrides: dict[str, Any] | None = None,
    path: Path | None = None,
) -> ConnectionConfig:
    """
    Resolve a connection config by profile name and optional overrides.
    If profile_name is 'active', use the profile marked as active in static.json.
    Overrides with a None value are ignored; the rest are merged over the profile.
    Raises ValueError if the profile is missing.
    """
    name = get_active_profile_name(path) if profile_name == "active" else profile_name
    base = load_connection_profiles(path).get(name)
    if base is None:
        raise ValueError(f"Unknown connection profile: {name!r}")
    updates = {k: v for k, v in (overrides or {}).items() if v is not None}
    if not updates:
        return base
    merged = {**base.model_dump(), **updates}
    return ConnectionConfig.model_validate(merged)
