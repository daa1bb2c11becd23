from __future__ import annotations

import socket
from typing import Callable, Protocol, Union


class Reachability(Protocol):
    def is_connected(self) -> bool: ...


class SocketReachability:
    """Reports connectivity by opening a TCP connection to a well-known host.

    The check only answers "is some route up"; it says nothing about the
    target API host.
    """

    def __init__(self, host: str = "1.1.1.1", port: int = 53, timeout_sec: float = 1.5):
        self.host = host
        self.port = int(port)
        self.timeout_sec = float(timeout_sec)

    def is_connected(self) -> bool:
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout_sec):
                return True
        except OSError:
            return False


class StaticReachability:
    """Fixed answer, or the result of a callable. Useful offline and in tests."""

    def __init__(self, connected: Union[bool, Callable[[], bool]] = True):
        self._connected = connected

    def is_connected(self) -> bool:
        if callable(self._connected):
            return bool(self._connected())
        return bool(self._connected)
