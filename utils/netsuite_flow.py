from airflow.decorators import task

import asyncio
import logging
from datetime import timedelta

from multidict import CIMultiDict

from suitetalk.framework.engine import RequestEngine
from suitetalk.framework.paginate import fetch_all_items
from suitetalk.nodes.rest_api_request import NetSuiteRestApiRequest
from suitetalk.nodes.suiteql_api_request import NetSuiteSuiteQLApiRequest
from utils.credentials import load_credentials

logger = logging.getLogger(__name__)

NODES = {
    "record": NetSuiteRestApiRequest,
    "suiteql": NetSuiteSuiteQLApiRequest,
}


# -------------------------------------------------
# ASYNC RUNNER
# -------------------------------------------------
def run_async(coro):
    """
    Standard asyncio runner for Airflow tasks.
    """
    return asyncio.run(coro)


def xcom_safe(message: dict) -> dict:
    """Plain-dict response headers for XCom; repeated headers become lists."""
    payload = message.get("payload")
    if isinstance(payload, dict) and isinstance(payload.get("headers"), CIMultiDict):
        headers, plain = payload["headers"], {}
        for key in headers.keys():
            values = headers.getall(key)
            plain[key] = values if len(values) > 1 else values[0]
        payload["headers"] = plain
    return message


# -------------------------------------------------
# NETSUITE REQUEST TASK FACTORY
# -------------------------------------------------
def generate_request_task(
    task_id: str,
    config: dict,
    variant: str = "record",
    fail_on_error: bool = False,
    credentials_loader=load_credentials,
):
    """
    Wrap one NetSuite request node in an Airflow task.

    The task takes the inbound message (XCom or literal) and returns the
    outbound message. With fail_on_error the task is marked failed when the
    message carries an error; the engine itself never retries.
    """
    node_cls = NODES[variant]

    @task(task_id=task_id, execution_timeout=timedelta(minutes=30), retries=0)
    def request_task(message: dict = None):
        async def _run():
            node = node_cls(config, credentials_loader())
            return await node.on_input(message or {})

        out = xcom_safe(run_async(_run()))
        if "error" in out:
            logger.error("%s | Request failed | error=%s", task_id, out["error"])
            if fail_on_error:
                raise RuntimeError(out["error"]["message"])
        return out

    return request_task


def generate_collection_task(
    resource_key: str,
    config: dict,
    max_pages: int = None,
    credentials_loader=load_credentials,
):
    """
    Airflow task that walks every page of a record collection.

    Returns the number of items fetched; a page failure fails the task.
    """

    @task(
        task_id=f"fetch_{resource_key}_items",
        execution_timeout=timedelta(minutes=120),
        retries=0,
    )
    def collection_task():
        async def _run():
            engine = RequestEngine(credentials_loader())
            return await fetch_all_items(engine, config, max_pages=max_pages)

        items, error = run_async(_run())
        if error is not None:
            raise RuntimeError(error.message)
        logger.info("%s | Fetched %s items", resource_key, len(items))
        return len(items)

    return collection_task
