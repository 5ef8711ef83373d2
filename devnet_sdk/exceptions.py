from typing import Any, Optional


class BaseDevnetException(Exception):
    message: str

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def serialize(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseDevnetException):
            return NotImplemented
        return self.message == other.message

    def __hash__(self) -> int:
        return hash(self.message)

    def __repr__(self) -> str:
        return self.message


class DevnetError(BaseDevnetException): ...


class GithubError(BaseDevnetException): ...


class DevnetProviderError(BaseDevnetException):
    """
    Raised when the HTTP transport towards Devnet fails in a way that is not
    an RPC-level error, e.g. when a request times out.
    """

    @classmethod
    def from_timeout(cls, timeout: float) -> "DevnetProviderError":
        return cls(
            f"Request to Devnet timed out after {timeout} seconds. "
            "Try increasing the timeout configured for the provider."
        )


class RpcError(BaseDevnetException):
    """
    Error object returned by Devnet in a JSON-RPC response.

    The server supplied ``code`` and ``message`` are kept as they are so that
    callers can branch on them.
    """

    code: int
    data: Optional[Any]

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.data = data

    @classmethod
    def from_response(cls, error: Any) -> "RpcError":
        if not isinstance(error, dict):
            return cls(code=-1, message=str(error))
        return cls(
            code=error.get("code", -1),
            message=error.get("message", ""),
            data=error.get("data"),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RpcError):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.code, self.message))

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"RpcError(code={self.code}, message={self.message!r})"


class MalformedRpcResponseError(BaseDevnetException):
    """
    Raised when a JSON-RPC response contains neither ``result`` nor ``error``.
    """

    body: Any

    def __init__(self, body: Any):
        super().__init__(f"Invalid JSON-RPC response: {body}")
        self.body = body
