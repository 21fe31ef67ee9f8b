"""A TCP client that connects to a server and hands back a connection."""

from __future__ import annotations

import socket
from typing import Any

from primeweb.connection import Connection, NetworkAddress, NetworkError


class TcpClient:
    """Opens one TCP connection at a time with a server."""

    def __init__(self) -> None:
        self._connection: Connection | None = None
        self._selected: NetworkAddress | None = None

    def connect(self, server: str, port: str | int) -> Connection:
        """Connect to ``server`` at ``port`` (a number or service name).

        Any connection still open is closed first.
        """
        self.close()
        addresses = self._fetch_available_addresses(server, port)
        sock, sockaddr = self._open_socket_with_server(addresses, server, port)
        self._selected = NetworkAddress.from_sockaddr(sockaddr)
        self._connection = Connection(sock, self._selected)
        try:
            sock.connect(sockaddr)
        except OSError:
            self.close()
            raise NetworkError(f"could not connect to {server}:{port}") from None
        return self._connection

    def close(self) -> None:
        """Close the connection with the server, if any."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        self._selected = None

    def server_address(self) -> NetworkAddress:
        """The address of the server this client is connected to."""
        if self._selected is None:
            raise NetworkError("not connected to a server")
        return self._selected

    def __enter__(self) -> TcpClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @staticmethod
    def _fetch_available_addresses(server: str, port: str | int) -> list:
        try:
            return socket.getaddrinfo(server, port, socket.AF_UNSPEC,
                                      socket.SOCK_STREAM)
        except socket.gaierror as error:
            raise NetworkError(f"getaddrinfo: {error.strerror}") from None

    @staticmethod
    def _open_socket_with_server(addresses: list, server: str,
                                 port: str | int) -> tuple[socket.socket, Any]:
        for family, kind, proto, _, sockaddr in addresses:
            try:
                sock = socket.socket(family, kind, proto)
            except OSError:
                continue
            return sock, sockaddr
        raise NetworkError(f"could not get address for {server}:{port}")