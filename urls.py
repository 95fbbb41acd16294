import os

from dotenv import load_dotenv

load_dotenv()


def account_host(account_id: str) -> str:
    """``1234567_SB1`` -> ``1234567-sb1.suitetalk.api.netsuite.com``"""
    if not account_id:
        raise RuntimeError(
            "Environment variable `ACCOUNT_ID` is not set.\n"
            "Ensure your `.env` file is present or set `ACCOUNT_ID` in the environment."
        )
    return f"{account_id.lower().replace('_', '-')}.suitetalk.api.netsuite.com"


def record_base_url(account_id: str = None) -> str:
    account_id = account_id or os.getenv("ACCOUNT_ID")
    return f"https://{account_host(account_id)}/services/rest/record/v1"


def suiteql_url(account_id: str = None) -> str:
    account_id = account_id or os.getenv("ACCOUNT_ID")
    return f"https://{account_host(account_id)}/services/rest/query/v1/suiteql"
