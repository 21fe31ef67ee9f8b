"""A TCP server that accepts connections and hands each one to a handler."""

from __future__ import annotations

import socket
import threading
from abc import ABC, abstractmethod

from primeweb.connection import Connection, NetworkAddress, NetworkError


class TcpServer(ABC):
    """Listens on a port and accepts incoming connection requests one by one.

    Subclasses implement :meth:`handle_client_connection`.
    """

    #: Default number of pending connection requests allowed in the backlog.
    default_connection_queue_capacity = 10
    #: Local address to bind; None means every local address.
    bind_host: str | None = None
    _ACCEPT_POLL_SECONDS = 0.2

    def __init__(self) -> None:
        self.connection_queue_capacity = self.default_connection_queue_capacity
        self.listening = True
        self.sockets: list[Connection] = []
        self._listener: socket.socket | None = None
        self._lock = threading.Lock()

    def listen_forever(self, port: str | int) -> None:
        """Listen on ``port`` and accept connections until the server dies."""
        self.listen_for_connections(port)
        self.accept_all_connections()

    def stop_listening(self) -> None:
        """Close the socket that receives connection requests."""
        listener, self._listener = self._listener, None
        if listener is not None:
            listener.close()

    def listen_for_connections(self, port: str | int) -> None:
        """Start queueing connection requests on ``port`` without blocking."""
        if self._listener is not None:
            raise NetworkError("server is already listening")
        addresses = self._fetch_available_addresses(port)
        listener = self._open_connection_request_socket(addresses, port)
        try:
            listener.listen(self.connection_queue_capacity)
        except OSError:
            listener.close()
            raise NetworkError(f"could not listen port {port}") from None
        listener.settimeout(self._ACCEPT_POLL_SECONDS)
        self._listener = listener

    def accept_all_connections(self) -> None:
        """Accept connection requests one after another, forever."""
        while True:
            self.accept_connection_request()

    def accept_connection_request(self) -> None:
        """Wait for one connection request, accept it and handle it."""
        listener = self._listener
        if listener is None:
            raise NetworkError("server is not listening")
        while True:
            if not self.listening:
                raise NetworkError("could not accept client connection")
            try:
                sock, sockaddr = listener.accept()
            except socket.timeout:
                continue
            except OSError:
                if not self.listening:
                    raise NetworkError("could not accept client connection") from None
                raise NetworkError("server killed by a signal") from None
            break
        if not self.listening:
            sock.close()
            raise NetworkError("could not accept client connection")
        sock.settimeout(None)
        try:
            peer = NetworkAddress.from_sockaddr(sockaddr)
        except ValueError:
            peer = None
        client = Connection(sock, peer)
        with self._lock:
            self.sockets.append(client)
        self.handle_client_connection(client)

    def network_address(self) -> NetworkAddress:
        """The local address and port where this server is listening."""
        listener = self._listener
        if listener is None:
            raise NetworkError("server is not listening")
        return NetworkAddress.from_sockaddr(listener.getsockname())

    @abstractmethod
    def handle_client_connection(self, client: Connection) -> None:
        """Called for every accepted connection."""

    def kill_server(self) -> None:
        """Stop accepting connections and close every active client socket."""
        self.listening = False
        with self._lock:
            active = list(self.sockets)
        for client in active:
            self.close_socket(client)

    def close_socket(self, client: Connection) -> None:
        """Close ``client`` and forget it, if it is one of the active sockets."""
        with self._lock:
            for index, active in enumerate(self.sockets):
                if active is client:
                    del self.sockets[index]
                    break
            else:
                return
        client.close()

    def _fetch_available_addresses(self, port: str | int) -> list:
        try:
            return socket.getaddrinfo(self.bind_host, port, socket.AF_UNSPEC,
                                      socket.SOCK_STREAM, 0, socket.AI_PASSIVE)
        except socket.gaierror as error:
            raise NetworkError(f"getaddrinfo: {error.strerror}") from None

    @staticmethod
    def _open_connection_request_socket(addresses: list,
                                        port: str | int) -> socket.socket:
        for family, kind, proto, _, sockaddr in addresses:
            try:
                sock = socket.socket(family, kind, proto)
            except OSError:
                continue
            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            except OSError:
                sock.close()
                raise NetworkError("could not set reusing socket") from None
            try:
                sock.bind(sockaddr)
            except OSError:
                sock.close()
                continue
            return sock
        raise NetworkError(f"no available addresses for port {port}")