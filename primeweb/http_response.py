"""HTTP responses sent back to the peer of a connection."""

from __future__ import annotations

from primeweb.connection import Connection
from primeweb.http_message import HttpMessage

#: Standard status codes and their reason phrases (RFC 7231).
REASON_PHRASES: dict[int, str] = {
    100: "Continue",
    101: "Switching Protocols",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Payload Too Large",
    414: "URI Too Long",
    415: "Unsupported Media Type",
    416: "Range Not Satisfiable",
    417: "Expectation Failed",
    426: "Upgrade Required",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
}


class HttpResponse(HttpMessage):
    """An HTTP response that is assembled and then sent to the peer."""

    reason_phrases = REASON_PHRASES

    def __init__(self, connection: Connection) -> None:
        super().__init__(connection)
        self.status_code = 200
        self.reason_phrase = ""
        # True when the application, not the server, will send this response
        self.handled = False

    def set_status_code(self, status_code: int, reason_phrase: str = "") -> bool:
        """Set the status code and reason phrase.

        Without a reason phrase the standard one is used; a non-standard code
        without a reason phrase is rejected and False is returned.
        """
        if reason_phrase:
            self.status_code = status_code
            self.reason_phrase = reason_phrase
            return True
        standard = self.reason_phrases.get(status_code)
        if standard is None:
            return False
        self.status_code = status_code
        self.reason_phrase = standard
        return True

    def build_status_line(self) -> str:
        """The status line, such as ``HTTP/1.0 404 Not Found``."""
        return f"{self.http_version} {self.status_code} {self.reason_phrase}"

    def send(self) -> bool:
        """Send the whole response; False on error or closed connection.

        A response handled by the application closes the connection once sent.
        """
        sep = self.line_separator
        connection = self.connection
        connection.write(self.build_status_line(), sep)
        for key, value in self.headers.items():
            connection.write(key, ": ", value, sep)
        self._send_body_metadata()
        connection.write(sep)
        connection.write(self.body.getvalue())
        sent = connection.send()
        if sent and self.handled:
            connection.close()
        return sent

    def keep_connection_alive(self) -> None:
        """Tell the server not to close the connection: the app will."""
        self.handled = True

    def _send_body_metadata(self) -> None:
        sep = self.line_separator
        if not self.get_header("Content-Type"):
            guess = self.guess_content_type()
            if guess:
                self.connection.write(guess, sep)
        if not self.get_header("Content-Length"):
            self.connection.write("Content-Length: ", self.body_length(), sep)