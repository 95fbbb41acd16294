from typing import Mapping

from oauthlib.oauth1.rfc5849 import signature

from suitetalk.framework.canonical import normalize_parameters


def build_base_string(method: str, base_url: str, params: Mapping) -> str:
    """
    Build the OAuth 1.0a signature base string.

    ``base_url`` must not carry a query string; its parameters belong in
    ``params`` together with the oauth_* values.
    """
    if "?" in base_url:
        raise ValueError(f"Base URL must not contain a query string: {base_url}")

    return signature.signature_base_string(
        method, signature.base_string_uri(base_url), normalize_parameters(params)
    )
