"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Look for settings that are valid but probably not what the operator wants.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    mail = config_dict.get("mail", {})
    if isinstance(mail, dict):
        if mail.get("max_retries") == 1:
            warning_messages.append(
                "mail.max_retries is 1: failed deliveries will not be retried"
            )

        retry_delay_ms = mail.get("retry_delay_ms")
        if isinstance(retry_delay_ms, int) and retry_delay_ms > 10000:
            warning_messages.append(
                f"Long mail.retry_delay_ms ({retry_delay_ms}) stalls the consumer between attempts"
            )

        if mail.get("use_tls") is False:
            warning_messages.append("mail.use_tls is disabled: mail is sent in clear text")

    broker = config_dict.get("broker", {})
    if isinstance(broker, dict):
        block_ms = broker.get("block_ms")
        if isinstance(block_ms, int) and block_ms > 5000:
            warning_messages.append(
                f"Long broker.block_ms ({block_ms}) delays consumer shutdown"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message through Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
