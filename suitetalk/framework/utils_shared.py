import json
import logging
from typing import Any, Optional

ERROR_DETAILS_FIELD = "o:errorDetails"


# -----------------------------
# Response body decoding
# -----------------------------
def decode_body(text: str) -> Any:
    """
    Decode a response body verbatim.

    Returns parsed JSON when the text is JSON, the raw text otherwise and
    None for an empty body.
    """
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


# -----------------------------
# NetSuite error detail
# -----------------------------
def extract_provider_detail(body: Any) -> Optional[str]:
    """
    Pull the first ``o:errorDetails[].detail`` message out of an error body.

    Args:
        body: Decoded error body (dict) or its raw JSON text.

    Returns:
        str | None: The provider's detail string, or None when absent.
    """
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except ValueError:
            return None

    if not isinstance(body, dict):
        return None

    details = body.get(ERROR_DETAILS_FIELD)
    if not isinstance(details, list) or not details:
        return None

    first = details[0]
    if isinstance(first, dict) and first.get("detail"):
        return str(first["detail"])
    return None


# -----------------------------
# JSON Validation
# -----------------------------
def validate_json(data, logger: logging.Logger) -> dict:
    """
    Validate a JSON page returned by the record API.

    Args:
        data: The data to validate.
        logger (logging.Logger): Logger instance.

    Returns:
        dict: Valid JSON data, or empty dict if invalid.
    """
    if isinstance(data, dict):
        return data

    logger.error(f"Invalid JSON structure: {str(data)[:200]}")
    return {}
