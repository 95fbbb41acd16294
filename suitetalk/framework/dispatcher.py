import asyncio
import json
import logging
from typing import Optional

import aiohttp
from multidict import CIMultiDict

from suitetalk.framework.errors import NetSuiteRequestError, ProviderError, TransportError
from suitetalk.framework.models import (
    ErrorRecord,
    RequestOutcome,
    ResponseEnvelope,
    SignedRequest,
)
from suitetalk.framework.utils_shared import decode_body, extract_provider_detail

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = aiohttp.ClientTimeout(total=300, connect=10, sock_read=300)


def _request_kwargs(signed: SignedRequest) -> dict:
    kwargs = {"headers": signed.headers}
    if signed.body is None:
        return kwargs
    if isinstance(signed.body, (str, bytes)):
        kwargs["data"] = signed.body
    else:
        kwargs["data"] = json.dumps(signed.body)
    return kwargs


async def _send(
    session: aiohttp.ClientSession,
    signed: SignedRequest,
    timeout: aiohttp.ClientTimeout,
) -> ResponseEnvelope:
    async with session.request(
        signed.method, signed.url, timeout=timeout, **_request_kwargs(signed)
    ) as resp:
        data = decode_body(await resp.text())
        if resp.status >= 400:
            raise ProviderError(
                f"Request failed with status code {resp.status}",
                status_code=resp.status,
                body=data,
            )
        return ResponseEnvelope(
            status_code=resp.status, headers=CIMultiDict(resp.headers), data=data
        )


async def _issue(
    signed: SignedRequest,
    session: Optional[aiohttp.ClientSession],
    timeout: aiohttp.ClientTimeout,
) -> ResponseEnvelope:
    try:
        if session is not None:
            return await _send(session, signed, timeout)
        async with aiohttp.ClientSession(timeout=timeout) as owned:
            return await _send(owned, signed, timeout)
    except asyncio.TimeoutError as e:
        raise TransportError(f"Request timed out | timeout={timeout}") from e
    except aiohttp.ClientError as e:
        raise TransportError(str(e) or e.__class__.__name__) from e


def normalize_error(exc: BaseException) -> ErrorRecord:
    """Map any failure of an invocation onto the single ErrorRecord shape."""
    if isinstance(exc, ProviderError):
        return ErrorRecord(
            message=str(exc),
            provider_detail=extract_provider_detail(exc.body),
            status_code=exc.status_code,
            raw_body=exc.body,
        )
    if isinstance(exc, asyncio.CancelledError):
        return ErrorRecord(message="Request cancelled before a response was received.")
    return ErrorRecord(message=str(exc) or exc.__class__.__name__)


async def dispatch(
    signed: SignedRequest,
    *,
    session: Optional[aiohttp.ClientSession] = None,
    timeout: aiohttp.ClientTimeout = HTTP_TIMEOUT,
) -> RequestOutcome:
    """
    Issue a signed request and normalize the result.

    Never raises: success yields a ResponseEnvelope, every failure (HTTP error
    status, network error, timeout, cancellation) an ErrorRecord. A session is
    opened and closed here unless the caller injects one.
    """
    try:
        outcome = await _issue(signed, session, timeout)
    except ProviderError as e:
        record = normalize_error(e)
        logger.error(
            "NetSuite Error | method=%s | url=%s | status=%s | error=%s | detail=%s",
            signed.method, signed.url, record.status_code, record.message, record.provider_detail,
        )
        return record
    except (NetSuiteRequestError, asyncio.CancelledError) as e:
        record = normalize_error(e)
        logger.error(
            "Transport failure | method=%s | url=%s | error=%s",
            signed.method, signed.url, record.message,
        )
        return record

    logger.info(
        "Request succeeded | method=%s | url=%s | status=%s",
        signed.method, signed.url, outcome.status_code,
    )
    return outcome
