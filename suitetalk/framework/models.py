from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from multidict import CIMultiDict

RECORD = "record"
SUITEQL = "suiteql"


@dataclass(frozen=True)
class Credentials:
    """Token-based-auth secrets for one NetSuite integration.

    Owned by the caller and shared read-only between invocations.
    """

    consumer_key: str
    consumer_secret: str
    token: str
    token_secret: str
    realm: str

    def missing_signing_fields(self) -> list:
        names = ("consumer_key", "consumer_secret", "token", "token_secret")
        return [name for name in names if not getattr(self, name)]

    def __repr__(self):
        # secrets stay out of logs and tracebacks
        return f"Credentials(consumer_key={self.consumer_key[:6]!r}..., realm={self.realm!r})"


@dataclass(frozen=True)
class PathSegment:
    value: str
    prefix: str = ""


@dataclass
class RequestDescriptor:
    method: str
    base_url: Optional[str]
    segments: Tuple[PathSegment, ...] = ()
    query_params: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    is_pagination_continuation: bool = False
    variant: str = RECORD


@dataclass(frozen=True)
class ComposedRequest:
    method: str
    base_url: str
    url: str
    query_params: Dict[str, str]
    body: Any = None


@dataclass(frozen=True)
class SignedRequest:
    method: str
    url: str
    authorization_header: str
    content_headers: Dict[str, str]
    body: Any = None

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": self.authorization_header, **self.content_headers}


@dataclass
class ResponseEnvelope:
    status_code: int
    headers: CIMultiDict
    data: Any

    ok = True

    def to_payload(self) -> dict:
        return {"headers": self.headers, "statusCode": self.status_code, "data": self.data}


@dataclass
class ErrorRecord:
    message: str
    provider_detail: Optional[str] = None
    status_code: Optional[int] = None
    raw_body: Any = None

    ok = False

    def to_payload(self) -> dict:
        error = {"message": self.message}
        if self.provider_detail is not None:
            error["providerDetail"] = self.provider_detail
        return {"error": error}


RequestOutcome = Union[ResponseEnvelope, ErrorRecord]
