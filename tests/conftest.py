"""
Global test configuration: credentials and environment isolation.
"""

import pytest

from suitetalk.framework.models import Credentials

NETSUITE_ENV_VARS = ("CONSUMER_KEY", "CONSUMER_SECRET", "TOKEN_ID", "TOKEN_SECRET", "ACCOUNT_ID")


@pytest.fixture(autouse=True)
def isolate_netsuite_env(monkeypatch):
    """Tests only see NetSuite settings they set themselves."""
    monkeypatch.setattr("dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False)
    for name in NETSUITE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def credentials():
    return Credentials(
        consumer_key="ck",
        consumer_secret="cs",
        token="tk",
        token_secret="ts",
        realm="1234567_SB1",
    )
