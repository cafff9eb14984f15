"""
Engine settings with defaults, read from ``settings.ASSESSMENT_ENGINE``.
"""

from typing import Any, Dict

from django.conf import settings

DEFAULTS: Dict[str, Any] = {
    "DEFAULT_PAGE_SIZE": 10,
    "MAX_PAGE_SIZE": 100,
    "SCORE_DECIMAL_PLACES": 2,
}


def engine_settings() -> Dict[str, Any]:
    configured = getattr(settings, "ASSESSMENT_ENGINE", {}) or {}
    return {**DEFAULTS, **configured}


def engine_setting(name: str) -> Any:
    return engine_settings()[name]
