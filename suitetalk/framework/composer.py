import json
import logging
import urllib.parse
from typing import Any, Dict, Mapping, Optional

from suitetalk.framework.canonical import as_text, encode_query, percent_encode, split_url
from suitetalk.framework.errors import MalformedBodyError, MalformedParamsError, MissingUrlError
from suitetalk.framework.models import (
    RECORD,
    SUITEQL,
    ComposedRequest,
    PathSegment,
    RequestDescriptor,
)

logger = logging.getLogger(__name__)

RECORD_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}
SUITEQL_HEADERS = {"Content-Type": "application/json", "Prefer": "transient"}

EXTERNAL_ID_PREFIX = "eid:"


# -----------------------------
# Field resolution
# -----------------------------
def _is_set(value) -> bool:
    return value is not None and value != ""


def resolve_field(name: str, config: Optional[Mapping], message: Optional[Mapping]):
    """Config wins; the inbound message is the fallback. Empty strings count as absent."""
    for source in (config, message):
        if isinstance(source, Mapping) and _is_set(source.get(name)):
            return source[name]
    return None


def _as_flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _page_value(name: str, value) -> str:
    text = value.strip() if isinstance(value, str) else value
    if isinstance(text, bool) or not isinstance(text, (int, str)) or not str(text).isdigit():
        raise MalformedParamsError(f"{name} must be a non-negative integer, got {value!r}")
    return str(text)


def _extra_params(params) -> Dict[str, str]:
    """Extra query parameters as text; None values are dropped."""
    if params is None:
        return {}
    if not isinstance(params, Mapping):
        raise MalformedParamsError(
            f"params must be a mapping of query parameters, got {type(params).__name__}"
        )
    return {str(key): as_text(value) for key, value in params.items() if value is not None}


def build_record_descriptor(config: Optional[Mapping], message: Optional[Mapping]) -> RequestDescriptor:
    """Resolve record-API inputs from node config and inbound message."""
    segments = []
    resource_object = resolve_field("resource_object", config, message)
    record_id = resolve_field("record_id", config, message)
    external_id = resolve_field("external_id", config, message)
    if _is_set(resource_object):
        segments.append(PathSegment(str(resource_object)))
    if _is_set(record_id):
        segments.append(PathSegment(str(record_id)))
    if _is_set(external_id):
        segments.append(PathSegment(percent_encode(external_id), EXTERNAL_ID_PREFIX))

    query_params: Dict[str, str] = {}
    for name in ("limit", "offset"):
        value = resolve_field(name, config, message)
        if _is_set(value):
            query_params[name] = _page_value(name, value)
    for key, value in _extra_params(resolve_field("params", config, message)).items():
        query_params.setdefault(key, value)

    return RequestDescriptor(
        method=str(resolve_field("method", config, message) or "GET").upper(),
        base_url=resolve_field("url", config, message),
        segments=tuple(segments),
        query_params=query_params,
        body=resolve_field("body", config, message),
        is_pagination_continuation=_as_flag(
            resolve_field("is_pagination_continuation", config, message)
        ),
        variant=RECORD,
    )


def build_suiteql_descriptor(config: Optional[Mapping], message: Optional[Mapping]) -> RequestDescriptor:
    """SuiteQL is always a POST of an opaque query payload; nothing else is merged."""
    return RequestDescriptor(
        method="POST",
        base_url=resolve_field("url", config, message),
        body=resolve_field("body", config, message),
        variant=SUITEQL,
    )


# -----------------------------
# Body handling
# -----------------------------
def _parse_body(body: Any) -> Any:
    if not isinstance(body, (str, bytes)):
        try:
            json.dumps(body)
        except (TypeError, ValueError) as e:
            raise MalformedBodyError(f"Request body is not JSON serializable: {e}") from e
        return body
    try:
        return json.loads(body)
    except ValueError as e:
        raise MalformedBodyError(f"Request body is not valid JSON: {e}") from e


def _suiteql_body(body: Any) -> Any:
    if not _is_set(body):
        raise MalformedBodyError("SuiteQL request requires a query body.")
    # validated but forwarded untouched
    _parse_body(body)
    return body


# -----------------------------
# Composition
# -----------------------------
def _checked_url(url: str) -> urllib.parse.SplitResult:
    try:
        parts = urllib.parse.urlsplit(url)
        parts.port  # raises on a malformed port
    except ValueError as e:
        raise MissingUrlError(f"The URL is not valid: {e}") from e
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise MissingUrlError(f"The URL is not valid: {url}")
    return parts


def compose(descriptor: RequestDescriptor) -> ComposedRequest:
    """
    Turn a descriptor into the final method, URL, query set and body.

    Parameters already embedded in the URL always win over limit/offset and
    extra params. A continuation URL is reused verbatim: no path segments, no
    merged parameters.
    """
    url = descriptor.base_url
    if not _is_set(url):
        raise MissingUrlError("The URL is missing. Please provide a valid URL.")
    url = str(url).strip()
    parts = _checked_url(url)

    if descriptor.variant == SUITEQL:
        base_url, embedded = split_url(url)
        return ComposedRequest(
            method="POST",
            base_url=base_url,
            url=url,
            query_params=embedded,
            body=_suiteql_body(descriptor.body),
        )

    method = descriptor.method.upper()
    body = _parse_body(descriptor.body) if _is_set(descriptor.body) else None

    if descriptor.is_pagination_continuation:
        base_url, embedded = split_url(url)
        logger.debug("Continuation request | url=%s | params=%s", base_url, embedded)
        return ComposedRequest(
            method=method, base_url=base_url, url=url, query_params=embedded, body=body
        )

    path = parts.path.rstrip("/") if descriptor.segments else parts.path
    for segment in descriptor.segments:
        path += f"/{segment.prefix}{segment.value}"
    base_url = urllib.parse.urlunsplit((parts.scheme, parts.netloc, path, "", ""))

    _, query_params = split_url(url)
    for key, value in descriptor.query_params.items():
        if key in query_params:
            logger.debug("Keeping URL parameter | %s=%s | ignored=%s", key, query_params[key], value)
            continue
        query_params[key] = as_text(value)

    final_url = f"{base_url}?{encode_query(query_params)}" if query_params else base_url
    return ComposedRequest(
        method=method, base_url=base_url, url=final_url, query_params=query_params, body=body
    )


def content_headers_for(descriptor: RequestDescriptor) -> Dict[str, str]:
    return dict(SUITEQL_HEADERS if descriptor.variant == SUITEQL else RECORD_HEADERS)
