"""Application environment names and their normalization."""

from __future__ import annotations

from enum import StrEnum


class AppEnv(StrEnum):
    DEV = "dev"
    PRODUCTION = "production"


_DEV_ALIASES = {"dev", "development", "local", "localhost"}
_PROD_ALIASES = {"prod", "production"}


def normalize_app_env(value: str | None) -> AppEnv:
    """
    Normalize an environment string into a known application environment.

    Unset or unknown values map to PRODUCTION so dev-only behavior (API docs,
    local metrics) is opt-in.
    """
    if value is None:
        return AppEnv.PRODUCTION
    lowered = value.strip().lower()
    if lowered in _DEV_ALIASES:
        return AppEnv.DEV
    if lowered in _PROD_ALIASES:
        return AppEnv.PRODUCTION
    return AppEnv.PRODUCTION
