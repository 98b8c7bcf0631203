"""
Helpers for logging journal data safely.

- ``sanitize_for_logging``: structured values (log ``extra`` fields)
- ``sanitize_log_message``: free text such as a model reply quoted in an error
- ``log_llm_usage``: one structured line per generation call
"""
import json
import logging
import re
from typing import Any, Optional

# Whole keys whose values never reach the logs.
SENSITIVE_KEYS = frozenset({
    "api_key", "key", "token", "password", "secret", "auth", "authorization",
    "email", "phone",
    "entry_text", "entry", "text", "symptoms", "message", "content",
})
# Key endings treated the same way (``access_token``, ``reply_text``).
SENSITIVE_SUFFIXES = ("_key", "_token", "_secret", "_password", "_email", "_text")
REDACTED = "***REDACTED***"

_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")
_EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


def _is_sensitive(key: str) -> bool:
    key = key.lower()
    return key in SENSITIVE_KEYS or key.endswith(SENSITIVE_SUFFIXES)


def _truncate(text: str, max_len: int) -> str:
    return text[:max_len] + "..." if len(text) > max_len else text


def sanitize_for_logging(data: Any, max_len: int = 100) -> Any:
    """
    Redact sensitive keys, strip control characters and truncate strings.

    Numbers and booleans pass through untouched; anything that is not a
    dict, list, string or number is logged by its ``str()``.
    """
    if data is None:
        return "None"
    if isinstance(data, (bool, int, float)):
        return data
    if isinstance(data, dict):
        return {
            k: REDACTED if _is_sensitive(str(k)) else sanitize_for_logging(v, max_len)
            for k, v in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [sanitize_for_logging(item, max_len) for item in data]
    return _truncate(_CONTROL_CHARS.sub("", str(data)), max_len)


def redact_emails(text: str) -> str:
    return _EMAIL.sub("[EMAIL_REDACTED]", text)


def sanitize_log_message(message: str, max_len: int = 200) -> str:
    """Emails redacted, control characters turned into spaces, then truncated."""
    return _truncate(_CONTROL_CHARS.sub(" ", redact_emails(message)), max_len)


# =============================================================================
# USAGE LOGGING
# =============================================================================

_usage_logger = logging.getLogger("Plusnote.Usage")


def log_llm_usage(
    provider: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
    duration_ms: Optional[int] = None,
    attempts: int = 1,
    purpose: str = "unknown",
) -> None:
    """
    Emit ``LLM_USAGE {json}`` for a completed generation call.

    Args:
        provider: 'gemini' or 'anthropic'
        model: Model identifier reported by the provider
        input_tokens: Prompt tokens
        output_tokens: Generated tokens
        duration_ms: Wall time including retries
        attempts: Attempts made (1 = no retry)
        purpose: 'analysis', 'report' or 'chat'
    """
    event = {
        "event": "llm_usage",
        "provider": provider,
        "model": model,
        "purpose": purpose,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
        "attempts": attempts,
    }
    if duration_ms is not None:
        event["duration_ms"] = duration_ms

    _usage_logger.info("LLM_USAGE %s", json.dumps(event))
