import asyncio
import logging
from typing import List, Mapping, Optional, Tuple

from suitetalk.framework.composer import build_record_descriptor
from suitetalk.framework.engine import RequestEngine
from suitetalk.framework.models import ErrorRecord, RequestDescriptor
from suitetalk.framework.utils_shared import validate_json

logger = logging.getLogger(__name__)

PAGE_DELAY = 0.0


def next_link(data: dict) -> Optional[str]:
    """href of the first ``rel == "next"`` link of a record-API page."""
    next_links = [
        link["href"]
        for link in data.get("links", [])
        if isinstance(link, dict) and link.get("rel") == "next" and link.get("href")
    ]
    return next_links[0] if next_links else None


async def fetch_all_items(
    engine: RequestEngine,
    config: Optional[Mapping] = None,
    message: Optional[Mapping] = None,
    max_pages: Optional[int] = None,
    page_delay: float = PAGE_DELAY,
) -> Tuple[List[dict], Optional[ErrorRecord]]:
    """
    Collect ``items`` across every page of a record-API collection.

    The first page is composed from config/message; every following page is
    the ``next`` link of the previous one, sent as a continuation request so
    its embedded limit/offset are signed as-is.

    Returns:
        (items, error) where error is the ErrorRecord that stopped the walk,
        or None when all pages were read.
    """
    descriptor = build_record_descriptor(config, message)
    resource = descriptor.segments[0].value if descriptor.segments else "records"

    all_items: List[dict] = []
    page = 0

    while True:
        outcome = await engine.execute(descriptor)
        page += 1
        if not outcome.ok:
            logger.error(
                "%s | Page %s failed | error=%s | detail=%s",
                resource, page, outcome.message, outcome.provider_detail,
            )
            return all_items, outcome

        data = validate_json(outcome.data, logger)
        items = data.get("items", [])
        all_items.extend(items)
        logger.info("%s | Fetched %s items | page=%s", resource, len(items), page)

        next_url = next_link(data)
        if not next_url or (max_pages is not None and page >= max_pages):
            break

        descriptor = RequestDescriptor(
            method="GET", base_url=next_url, is_pagination_continuation=True
        )
        if page_delay:
            await asyncio.sleep(page_delay)

    logger.info("%s | Total %s records fetched | pages=%s", resource, len(all_items), page)
    return all_items, None
