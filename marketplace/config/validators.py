"""Soft checks on raw configuration that warn instead of failing."""

import warnings
from typing import Any, Dict, List

from marketplace.domain.enums import UserRole


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Inspect the raw configuration for settings that are legal but risky.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    messages = []

    auth = config_dict.get("auth") or {}
    if isinstance(auth, dict):
        if auth.get("require_email") is False:
            messages.append(
                "auth.require_email is false: returning users may log in without "
                "an email claim through their provider link"
            )

        role = auth.get("default_role")
        if isinstance(role, str) and role != role.strip().lower():
            messages.append(
                f"auth.default_role '{role}' is not a lowercase token; "
                f"expected one of: {', '.join(r.value for r in UserRole)}"
            )

    log_settings = config_dict.get("logging") or {}
    if isinstance(log_settings, dict) and str(log_settings.get("level", "")).upper() == "DEBUG":
        messages.append("logging.level is DEBUG: resolved identity metadata will be logged")

    return messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message as a UserWarning."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
