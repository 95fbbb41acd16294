class NetSuiteRequestError(Exception):
    """Base class for every failure the request engine can produce."""


class CredentialError(NetSuiteRequestError):
    """Signing secrets are missing or incomplete. Fatal, never retried."""


class MissingUrlError(NetSuiteRequestError):
    """No usable endpoint could be resolved from config or message."""


class MalformedBodyError(NetSuiteRequestError):
    """A request body was required or supplied but is not valid JSON."""


class MalformedParamsError(NetSuiteRequestError):
    """Query inputs (params, limit, offset) have the wrong shape."""


class TransportError(NetSuiteRequestError):
    """Network level failure: connection, timeout or cancellation."""


class ProviderError(TransportError):
    """NetSuite answered with an error status."""

    def __init__(self, message, status_code=None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
