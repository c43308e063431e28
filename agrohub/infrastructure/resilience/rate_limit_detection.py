"""Classifies upstream exceptions as provider rate limiting.

Providers surface quota exhaustion inconsistently across transports: typed
SDK exceptions, an HTTP status attribute, a numeric error code, or a status
string such as RESOURCE_EXHAUSTED. Structured signals are checked first; the
message-text match is kept only as a last resort and lives in its own
function.
"""

import logging
import re
from typing import Any

from groq import RateLimitError as GroqRateLimitError
from openai import RateLimitError as OpenAIRateLimitError

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS_CODE = 429
RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"

RATE_LIMIT_EXCEPTIONS = (OpenAIRateLimitError, GroqRateLimitError)

_STATUS_CODE_TOKEN = re.compile(r"(?<!\d)429(?!\d)")


def _is_429(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value == RATE_LIMIT_STATUS_CODE
    if isinstance(value, str):
        return value.strip() == str(RATE_LIMIT_STATUS_CODE)
    return False


def _has_structured_signal(error: BaseException) -> bool:
    """Checks typed exceptions and status/code attributes."""
    if isinstance(error, RATE_LIMIT_EXCEPTIONS):
        return True

    for attr in ("status_code", "status", "code"):
        value = getattr(error, attr, None)
        if _is_429(value):
            return True
        if isinstance(value, str) and value.upper() == RESOURCE_EXHAUSTED:
            return True

    # Error bodies shaped like {"error": {"code": 429, "status": "RESOURCE_EXHAUSTED"}}
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        details = body.get("error", body)
        if isinstance(details, dict):
            if _is_429(details.get("code")):
                return True
            status = details.get("status")
            if isinstance(status, str) and status.upper() == RESOURCE_EXHAUSTED:
                return True
    return False


def _message_signals_rate_limit(error: BaseException) -> bool:
    """Compatibility match on the error text. Last resort only."""
    message = str(error) or ""
    return RESOURCE_EXHAUSTED in message or bool(_STATUS_CODE_TOKEN.search(message))


def is_rate_limit_error(error: BaseException) -> bool:
    """Returns True when `error` means the provider is rate limiting us."""
    if _has_structured_signal(error):
        return True
    if _message_signals_rate_limit(error):
        logger.debug(f"Rate limit inferred from error message of {type(error).__name__}")
        return True
    return False
