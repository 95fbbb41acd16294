import asyncio
import logging

from suitetalk.framework.engine import RequestEngine
from urls import record_base_url, suiteql_url
from utils.credentials import load_credentials

logger = logging.getLogger(__name__)

RECORD_TYPES = ["customer", "customerMessage", "customerCategory", "customerPayment", "customerSubsidiaryRelationship", "inventoryNumber", "inventoryTransfer", "inventoryItem", "salesOrder"]  # Add more if needed
PAGE_SIZE = 1000


# -----------------------
# SUITEQL COUNT
# -----------------------
async def get_count_suiteql(engine, record_type, url=None):
    query = {"q": f"SELECT COUNT(*) AS total FROM {record_type}"}
    outcome = await engine.execute_suiteql({"url": url or suiteql_url(), "body": query})
    if not outcome.ok:
        logger.warning("%s | SuiteQL count failed | error=%s", record_type, outcome.message)
        return None
    try:
        return int(outcome.data["items"][0]["total"])
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.warning("%s | Unexpected SuiteQL response | error=%s", record_type, e)
        return None


# -----------------------
# GET + PAGING FUNCTION (fallback)
# -----------------------
async def get_count_get(engine, record_type, base_url=None, page_size=PAGE_SIZE):
    count = 0
    offset = 0
    while True:
        outcome = await engine.execute_record({
            "url": base_url or record_base_url(),
            "resource_object": record_type,
            "limit": page_size,
            "offset": offset,
        })
        if not outcome.ok:
            logger.error(
                "Error fetching %s: %s %s", record_type, outcome.status_code, outcome.provider_detail or outcome.message
            )
            return None
        data = outcome.data or {}
        count += len(data.get("items", []))
        if not data.get("hasMore", False):
            break
        offset += page_size
    return count


async def count_records(engine, record_type, base_url=None, query_url=None):
    total = await get_count_suiteql(engine, record_type, query_url)
    if total is None:
        total = await get_count_get(engine, record_type, base_url)
    return total


async def main(record_types=RECORD_TYPES):
    engine = RequestEngine(load_credentials())
    for record_type in record_types:
        total = await count_records(engine, record_type)
        print(f"Record type: {record_type} | Total records: {total}")


# -----------------------
# MAIN LOOP
# -----------------------
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    asyncio.run(main())
