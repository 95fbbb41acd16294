import asyncio
import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

import aiohttp

from logs.requestlogger import get_logger, save_request_status, setup_logging_for_request
from suitetalk.framework.dispatcher import HTTP_TIMEOUT
from suitetalk.framework.engine import RequestEngine
from suitetalk.framework.models import Credentials, RequestOutcome

# camelCase names of the flow messages and the legacy node field names
FIELD_ALIASES = {
    "resourceObject": "resource_object",
    "netsuiteobject": "resource_object",
    "recordId": "record_id",
    "objectid": "record_id",
    "externalId": "external_id",
    "objectexternalid": "external_id",
    "bodyNetsuite": "body",
    "isPaginationContinuation": "is_pagination_continuation",
}

SUCCESS_STATUS = {"fill": "green", "shape": "dot", "text": "success"}


def normalize_fields(fields: Optional[Mapping]) -> dict:
    """Rename aliased input fields to the engine's names; canonical names win."""
    if not isinstance(fields, Mapping):
        return {}
    normalized = {}
    for key, value in fields.items():
        name = FIELD_ALIASES.get(key, key)
        if name in normalized and key != name:
            continue
        normalized[name] = value
    return normalized


def failure_status(message: str) -> dict:
    return {"fill": "red", "shape": "ring", "text": message}


class RequestNode:
    """
    Thin host adapter: turns an inbound message into one engine invocation
    and the outcome back into an outbound message plus a status indicator.
    """

    name = "netsuite-request"

    def __init__(
        self,
        config: Optional[Mapping],
        credentials: Credentials,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: aiohttp.ClientTimeout = HTTP_TIMEOUT,
        status_dir: Optional[str] = None,
    ):
        self.config = normalize_fields(config)
        self.engine = RequestEngine(credentials, session=session, timeout=timeout)
        self.status = {}
        self.status_dir = status_dir
        self.outer_logs_dir = None
        self.logger = logging.getLogger(f"suitetalk.nodes.{self.name}")
        if status_dir:
            self.outer_logs_dir, logs_dir = setup_logging_for_request(
                self.name, datetime.now(timezone.utc), root=status_dir
            )
            self.logger = get_logger(self.name, logs_dir)

    def message_fields(self, msg: Mapping) -> dict:
        return normalize_fields(msg.get("payload"))

    async def run(self, fields: dict) -> RequestOutcome:
        raise NotImplementedError

    def success_payload(self, outcome):
        return outcome.to_payload()

    def error_payload(self, outcome):
        return outcome.to_payload()["error"]

    async def on_input(self, msg: Mapping) -> dict:
        """Handle one message. Always returns exactly one outbound message."""
        out = dict(msg)
        outcome = await self.run(self.message_fields(msg))

        if outcome.ok:
            out["payload"] = self.success_payload(outcome)
            self.status = dict(SUCCESS_STATUS)
        else:
            out["error"] = self.error_payload(outcome)
            self.status = failure_status(outcome.message)
            self.logger.error("NetSuite Error: %s", outcome.message)
            if outcome.provider_detail:
                self.logger.error("NetSuite Error Detail: %s", outcome.provider_detail)

        await self._report_status(outcome.status_code)
        return out

    async def _report_status(self, status_code=None):
        if not self.outer_logs_dir:
            return
        try:
            await asyncio.to_thread(
                save_request_status, self.outer_logs_dir, self.name, self.status, status_code
            )
        except Exception as e:
            self.logger.warning("%s | Status not saved | error=%s", self.name, e)
