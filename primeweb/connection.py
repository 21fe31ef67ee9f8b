"""Buffered, line-oriented connections over stream sockets."""

from __future__ import annotations

import ipaddress
import socket
import threading
from dataclasses import dataclass
from typing import Any

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"
_RECEIVE_CAPACITY = 65535


class NetworkError(RuntimeError):
    """A network operation could not be completed."""


@dataclass(frozen=True)
class NetworkAddress:
    """The IP address and port of one end of a connection."""

    ip: str
    port: int

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port out of range: {self.port}")

    @classmethod
    def from_sockaddr(cls, sockaddr: Any) -> NetworkAddress:
        """Build an address from an IPv4 or IPv6 socket address tuple."""
        if not isinstance(sockaddr, tuple) or len(sockaddr) < 2:
            raise ValueError(f"not an IPv4 or IPv6 socket address: {sockaddr!r}")
        host, port = sockaddr[0], sockaddr[1]
        if not isinstance(host, str) or not isinstance(port, int):
            raise ValueError(f"not an IPv4 or IPv6 socket address: {sockaddr!r}")
        ip = host.split("%", 1)[0]
        try:
            ipaddress.ip_address(ip)
        except ValueError:
            raise ValueError(f"not an IP address: {host!r}") from None
        return cls(ip, port)

    def __str__(self) -> str:
        return f"{self.ip} port {self.port}"


def _peer_of(sock: socket.socket) -> NetworkAddress | None:
    try:
        return NetworkAddress.from_sockaddr(sock.getpeername())
    except (OSError, ValueError):
        return None


class Connection:
    """A connected socket with an input buffer for reading and an output
    buffer that collects data until :meth:`send` is called.

    Every holder of the same object shares the socket and both buffers.
    """

    def __init__(self, sock: socket.socket, peer: NetworkAddress | None = None) -> None:
        self._sock: socket.socket | None = sock
        self.peer = peer if peer is not None else _peer_of(sock)
        self._input = bytearray()
        self._output = bytearray()
        self._failed = False
        self._lock = threading.Lock()

    def close(self) -> None:
        """Close the connection with the peer; closing twice does nothing."""
        with self._lock:
            sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        sock.close()
        if self.peer is not None:
            print(f"connection -----closed with peer {self.peer.ip} "
                  f"port {self.peer.port}", flush=True)
        else:
            print("connection -----closed with peer", flush=True)

    def read_line(self, separator: str = "\n") -> str | None:
        """Return the next line without its separator, or None at end of stream.

        A last line that the peer did not terminate is returned as it is.
        """
        sep = separator.encode(_ENCODING, _ERRORS)
        if not sep:
            raise ValueError("empty separator")
        while True:
            index = self._input.find(sep)
            if index >= 0:
                line = bytes(self._input[:index])
                del self._input[:index + len(sep)]
                return line.decode(_ENCODING, _ERRORS)
            if not self.receive():
                if self._input:
                    line = bytes(self._input)
                    self._input.clear()
                    return line.decode(_ENCODING, _ERRORS)
                return None

    def receive(self) -> bool:
        """Block until some data arrives and buffer it.

        Returns False when the peer closed the connection or an error happened.
        """
        sock = self._sock
        if sock is None:
            self._failed = True
            return False
        try:
            data = sock.recv(_RECEIVE_CAPACITY)
        except OSError:
            data = b""
        if not data:
            self._failed = True
            return False
        self._input += data
        return True

    def read_available(self, capacity: int = _RECEIVE_CAPACITY) -> bytes:
        """Return up to ``capacity`` bytes, buffered ones first.

        An empty result means the peer closed the connection.
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if self._input:
            chunk = bytes(self._input[:capacity])
            del self._input[:capacity]
            return chunk
        sock = self._sock
        if sock is None:
            raise NetworkError("connection is closed")
        try:
            return sock.recv(capacity)
        except OSError as error:
            self._failed = True
            raise NetworkError(str(error)) from error

    def read(self, size: int) -> bytes:
        """Read exactly ``size`` bytes, blocking until all have arrived."""
        if size < 0:
            raise ValueError("size must not be negative")
        data = bytearray()
        while len(data) < size:
            chunk = self.read_available(size - len(data))
            if not chunk:
                self._failed = True
                raise NetworkError(
                    f"connection closed after {len(data)} of {size} bytes")
            data += chunk
        return bytes(data)

    def write(self, *args: Any) -> Connection:
        """Append values to the output buffer; they go out on :meth:`send`."""
        for value in args:
            if isinstance(value, (bytes, bytearray, memoryview)):
                self._output += value
            elif isinstance(value, bool):
                self._output += b"1" if value else b"0"
            else:
                self._output += str(value).encode(_ENCODING, _ERRORS)
        return self

    def send(self) -> bool:
        """Send the whole output buffer; False on error or closed connection."""
        sock = self._sock
        if sock is None:
            self._failed = True
            return False
        try:
            sock.sendall(self._output)
        except OSError:
            self._failed = True
            return False
        self._output.clear()
        return True

    def fileno(self) -> int:
        """The socket's file descriptor, or -1 once closed."""
        sock = self._sock
        return sock.fileno() if sock is not None else -1

    def __bool__(self) -> bool:
        return self._sock is not None and not self._failed

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Connection):
            return NotImplemented
        return self.fileno() == other.fileno()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Connection):
            return NotImplemented
        return self.fileno() < other.fileno()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Connection(fileno={self.fileno()}, peer={self.peer!r})"