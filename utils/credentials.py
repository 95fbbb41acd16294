import os
from typing import Mapping, Optional

from dotenv import load_dotenv

from suitetalk.framework.errors import CredentialError
from suitetalk.framework.models import Credentials

REQUIRED_VARS = {
    "CONSUMER_KEY": "consumer_key",
    "CONSUMER_SECRET": "consumer_secret",
    "TOKEN_ID": "token",
    "TOKEN_SECRET": "token_secret",
    "ACCOUNT_ID": "realm",
}


def load_credentials(env: Optional[Mapping] = None) -> Credentials:
    """
    Read NetSuite token-based-auth secrets.

    Values come from ``env`` when given, otherwise from the process
    environment after loading a ``.env`` file. ACCOUNT_ID doubles as the
    OAuth realm.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    missing = [name for name in REQUIRED_VARS if not env.get(name)]
    if missing:
        raise CredentialError(
            f"Missing NetSuite environment variables: {', '.join(missing)}"
        )

    return Credentials(**{field: env[name] for name, field in REQUIRED_VARS.items()})
