import logging
from typing import Callable, Mapping, Optional

import aiohttp

from suitetalk.framework.composer import (
    build_record_descriptor,
    build_suiteql_descriptor,
    compose,
    content_headers_for,
)
from suitetalk.framework.dispatcher import HTTP_TIMEOUT, dispatch, normalize_error
from suitetalk.framework.errors import NetSuiteRequestError
from suitetalk.framework.models import (
    RECORD,
    SUITEQL,
    Credentials,
    ErrorRecord,
    RequestDescriptor,
    RequestOutcome,
    SignedRequest,
)
from suitetalk.framework.signer import sign_request

logger = logging.getLogger(__name__)


class RequestEngine:
    """
    Signed-request engine for the NetSuite record API and SuiteQL.

    One linear pass per invocation: Building -> Signing -> Dispatching ->
    Succeeded | Failed. The engine keeps no per-request state, so one
    instance can serve any number of concurrent invocations. Every
    invocation returns exactly one outcome; nothing is raised to the caller.
    """

    def __init__(
        self,
        credentials: Credentials,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: aiohttp.ClientTimeout = HTTP_TIMEOUT,
    ):
        self.credentials = credentials
        self.session = session
        self.timeout = timeout

    def _not_sent(self, variant: str, exc: Exception) -> ErrorRecord:
        if isinstance(exc, NetSuiteRequestError):
            record = normalize_error(exc)
            logger.error(
                "%s | Request not sent | error_type=%s | error=%s",
                variant, exc.__class__.__name__, record.message,
            )
        else:
            record = ErrorRecord(message=f"Request could not be built: {exc}")
            logger.exception("%s | Request not sent | error_type=%s", variant, exc.__class__.__name__)
        return record

    def _prepare(self, descriptor: RequestDescriptor) -> SignedRequest:
        composed = compose(descriptor)
        return sign_request(self.credentials, composed, content_headers_for(descriptor))

    async def _run(self, variant: str, build: Callable[[], RequestDescriptor]) -> RequestOutcome:
        try:
            signed = self._prepare(build())
        except Exception as e:
            return self._not_sent(variant, e)

        logger.info(
            "%s | Dispatching | method=%s | url=%s",
            variant, signed.method, signed.url,
        )
        return await dispatch(signed, session=self.session, timeout=self.timeout)

    async def execute(self, descriptor: RequestDescriptor) -> RequestOutcome:
        return await self._run(descriptor.variant, lambda: descriptor)

    async def execute_record(
        self, config: Optional[Mapping] = None, message: Optional[Mapping] = None
    ) -> RequestOutcome:
        return await self._run(RECORD, lambda: build_record_descriptor(config, message))

    async def execute_suiteql(
        self, config: Optional[Mapping] = None, message: Optional[Mapping] = None
    ) -> RequestOutcome:
        return await self._run(SUITEQL, lambda: build_suiteql_descriptor(config, message))
