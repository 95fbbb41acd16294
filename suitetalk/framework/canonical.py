import urllib.parse
from typing import Dict, Mapping, Tuple

from oauthlib.oauth1.rfc5849 import signature, utils


def as_text(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def percent_encode(value) -> str:
    """
    RFC 3986 percent-encoding as required by OAuth 1.0a.

    Only ALPHA, DIGIT and "-._~" are left as-is; "/" and space are encoded too.
    """
    return utils.escape(as_text(value))


def normalize_parameters(params: Mapping) -> str:
    """
    Serialize a parameter mapping into the OAuth normalized parameter string.

    Keys and values are encoded first, then sorted by encoded key, so input
    insertion order never changes the result. Two raw keys that encode to the
    same string are not supported.

    Args:
        params (Mapping): parameter name -> value, values coerced to str.

    Returns:
        str: ``key=value&key=value`` in canonical order.
    """
    return signature.normalize_parameters(
        [(as_text(key), as_text(value)) for key, value in params.items()]
    )


def encode_query(params: Mapping) -> str:
    """Wire query string, insertion order kept, same encoding as the signature."""
    return "&".join(
        f"{percent_encode(key)}={percent_encode(value)}" for key, value in params.items()
    )


def split_url(url: str) -> Tuple[str, Dict[str, str]]:
    """
    Split a URL into its query-less base and the parameters it already carries.

    Repeated keys keep their first value; multi-valued parameters are unsupported.
    """
    parts = urllib.parse.urlsplit(url)
    base_url = urllib.parse.urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))

    params: Dict[str, str] = {}
    for key, value in urllib.parse.parse_qsl(parts.query, keep_blank_values=True):
        params.setdefault(key, value)
    return base_url, params
