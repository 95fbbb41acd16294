import logging
import secrets
import time
from typing import Dict, Mapping, Optional, Tuple

from oauthlib.oauth1.rfc5849 import signature as oauth_signature

from suitetalk.framework.base_string import build_base_string
from suitetalk.framework.canonical import percent_encode
from suitetalk.framework.errors import CredentialError
from suitetalk.framework.models import ComposedRequest, Credentials, SignedRequest

logger = logging.getLogger(__name__)

SIGNATURE_METHOD = "HMAC-SHA256"
OAUTH_VERSION = "1.0"

# Field order of the Authorization header. Not mandated by the protocol,
# kept fixed so headers are byte-for-byte reproducible.
HEADER_FIELDS = (
    "oauth_consumer_key",
    "oauth_token",
    "oauth_signature_method",
    "oauth_timestamp",
    "oauth_nonce",
    "oauth_version",
    "oauth_signature",
)


def new_nonce() -> str:
    """32 lowercase hex chars from the OS CSPRNG."""
    return secrets.token_hex(16)


def current_timestamp() -> str:
    return str(int(time.time()))


def compute_signature(base_string: str, consumer_secret: str, token_secret: str) -> str:
    """
    Base64 HMAC-SHA256 of the base string.

    The key is ``percent_encode(consumer_secret) + "&" + percent_encode(token_secret)``.
    """
    return oauth_signature.sign_hmac_sha256(base_string, consumer_secret, token_secret)


def sign(
    credentials: Credentials,
    method: str,
    base_url: str,
    query_params: Optional[Mapping] = None,
    *,
    nonce: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> Tuple[str, Dict[str, str]]:
    """
    Sign one request with HMAC-SHA256.

    A fresh nonce and timestamp are generated on every call; ``nonce`` and
    ``timestamp`` are only meant for reproducible tests.

    Returns:
        (signature, oauth_params) where oauth_params already includes
        ``oauth_signature``.
    """
    missing = credentials.missing_signing_fields()
    if missing:
        raise CredentialError(
            f"OAuth credentials are missing or incomplete: {', '.join(missing)}"
        )

    oauth_params = {
        "oauth_consumer_key": credentials.consumer_key,
        "oauth_nonce": nonce or new_nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": timestamp or current_timestamp(),
        "oauth_token": credentials.token,
        "oauth_version": OAUTH_VERSION,
    }

    merged = {**(query_params or {}), **oauth_params}
    base_string = build_base_string(method, base_url, merged)
    signature = compute_signature(
        base_string, credentials.consumer_secret, credentials.token_secret
    )

    oauth_params["oauth_signature"] = signature
    return signature, oauth_params


def build_authorization_header(realm: str, oauth_params: Mapping, signature: str) -> str:
    values = {**oauth_params, "oauth_signature": signature}
    fields = [f'realm="{percent_encode(realm or "")}"']
    fields.extend(f'{name}="{percent_encode(values[name])}"' for name in HEADER_FIELDS)
    return "OAuth " + ", ".join(fields)


def sign_request(
    credentials: Credentials,
    composed: ComposedRequest,
    content_headers: Mapping,
) -> SignedRequest:
    signature, oauth_params = sign(
        credentials, composed.method, composed.base_url, composed.query_params
    )
    logger.debug(
        "Signed request | method=%s | url=%s | nonce=%s",
        composed.method,
        composed.base_url,
        oauth_params["oauth_nonce"],
    )
    return SignedRequest(
        method=composed.method,
        url=composed.url,
        authorization_header=build_authorization_header(
            credentials.realm, oauth_params, signature
        ),
        content_headers=dict(content_headers),
        body=composed.body,
    )
