"""Session-stored dashboard preset preference."""

from __future__ import annotations

from typing import Final

from django.http import HttpRequest

from core.jsonrender.presets import DASHBOARD_PRESETS, DEFAULT_PRESET

PRESET_SESSION_KEY: Final[str] = "dashboard_preset"


def get_stored_preset(request: HttpRequest) -> str:
    """Return the stored preset key, falling back to the default for unknown values."""

    stored = getattr(request, "session", {}).get(PRESET_SESSION_KEY)
    if isinstance(stored, str) and stored in DASHBOARD_PRESETS:
        return stored
    return DEFAULT_PRESET


def set_stored_preset(request: HttpRequest, preset: str) -> bool:
    """Store a preset key in the current session.

    Args:
        request: Incoming request whose session will be updated.
        preset: Preset key to store.

    Returns:
        True when stored; False (and nothing changes) for unknown keys.
    """

    if preset not in DASHBOARD_PRESETS:
        return False
    request.session[PRESET_SESSION_KEY] = preset
    request.session.modified = True
    return True
