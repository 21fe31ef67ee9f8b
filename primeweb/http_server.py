"""An HTTP server that parses requests and lets subclasses answer them."""

from __future__ import annotations

from abc import abstractmethod

from primeweb.connection import Connection
from primeweb.http_message import HttpRequest
from primeweb.http_response import HttpResponse
from primeweb.tcp_server import TcpServer


class HttpServer(TcpServer):
    """Reads one HTTP request per accepted connection.

    Subclasses implement :meth:`handle_http_request`.
    """

    def handle_client_connection(self, client: Connection) -> None:
        """Parse a request from ``client`` and hand it to the subclass."""
        request = HttpRequest(client)
        if not request.parse():
            # A previous valid request may still be in progress: leave the
            # connection open, just stop waiting for more requests.
            return
        response = HttpResponse(client)
        self.handle_http_request(request, response)
        if not response.handled or request.http_version == "HTTP/1.0":
            self.close_socket(client)
            client.close()

    @abstractmethod
    def handle_http_request(self, request: HttpRequest,
                            response: HttpResponse) -> bool:
        """Answer one request; return True to keep serving this client."""