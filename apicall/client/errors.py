from __future__ import annotations

from typing import Optional


class ApiCallError(Exception):
    """
    Base exception for all request helper failures.
    """

    pass


class NoConnectivity(ApiCallError):
    """
    Raised before dispatch when the reachability check reports no network.
    """

    def __init__(self, message: str = "no internet connection") -> None:
        super().__init__(message)


class TransportError(ApiCallError):
    """
    Raised when the transport fails to produce a response (DNS, timeout, reset).

    The underlying exception is always chained as ``__cause__``.
    """

    pass


class DecodeError(ApiCallError):
    """
    Raised when a response body cannot be decoded into the expected type.
    """

    pass


class InvalidResponse(ApiCallError):
    """
    Raised when the transport hands back something that is not an HTTP response.
    """

    def __init__(self, message: str = "Invalid response") -> None:
        super().__init__(message)


class RequestFailed(ApiCallError):
    """
    Raised for a non-success status whose body carries no decodable result.
    """

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = int(status)
        self.message = message if message is not None else f"Error code: {self.status}"
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"RequestFailed(status={self.status}, message={self.message!r})"
