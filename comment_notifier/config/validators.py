"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for settings that are valid but probably unintended.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    delivery_log = config_dict.get("delivery_log", {})
    if isinstance(delivery_log, dict) and delivery_log.get("enabled") is False:
        warning_messages.append(
            "delivery_log.enabled is false: delivery outcomes will only appear in logs"
        )

    mail = config_dict.get("mail", {})
    if isinstance(mail, dict):
        if mail.get("use_tls") is False:
            warning_messages.append("mail.use_tls is false: mail will be sent unencrypted")

        max_workers = mail.get("max_workers", 2)
        if isinstance(max_workers, int) and max_workers > 8:
            warning_messages.append(
                f"Large mail.max_workers ({max_workers}) may exceed SMTP server connection limits"
            )

    wiki_name = config_dict.get("wiki_name")
    if isinstance(wiki_name, str) and ("[" in wiki_name or "]" in wiki_name):
        warning_messages.append(
            f"wiki_name '{wiki_name}' contains brackets; subjects will show nested brackets"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
