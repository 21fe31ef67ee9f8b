"""HTTP messages, their headers, and parsing of requests from a connection."""

from __future__ import annotations

import io
import re
from collections.abc import Iterator, MutableMapping
from typing import Any

from primeweb.connection import Connection, NetworkAddress, NetworkError

_C_WHITESPACE = " \t\n\v\f\r"
_CONTENT_LENGTH = re.compile(r"[ \t\n\v\f\r]*\+?([0-9]+)")


class Headers(MutableMapping):
    """Header fields with case-insensitive keys, iterated in key order.

    The spelling of a key is the one used when it was first set.
    """

    def __init__(self, *args: Any, **kwargs: str) -> None:
        self._items: dict[str, tuple[str, str]] = {}
        self.update(*args, **kwargs)

    def __setitem__(self, key: str, value: str) -> None:
        folded = key.lower()
        existing = self._items.get(folded)
        self._items[folded] = (existing[0] if existing else key, value)

    def __getitem__(self, key: str) -> str:
        return self._items[key.lower()][1]

    def __delitem__(self, key: str) -> None:
        del self._items[key.lower()]

    def __iter__(self) -> Iterator[str]:
        for folded in sorted(self._items):
            yield self._items[folded][0]

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"


class HttpMessage:
    """Common parts of HTTP requests and responses."""

    line_separator = "\r\n"

    def __init__(self, connection: Connection) -> None:
        self.connection = connection
        self.http_version = "HTTP/1.0"
        self.headers = Headers()
        self.body = io.StringIO()

    def network_address(self) -> NetworkAddress | None:
        """The address of the peer on the other side of the connection."""
        return self.connection.peer

    def set_header(self, key: str, value: str) -> None:
        """Add a header, or overwrite it if the key is already present."""
        self.headers[key] = value

    def get_header(self, key: str, default: str = "") -> str:
        """The value of header ``key``, or ``default`` when it is absent."""
        return self.headers.get(key, default)

    def body_length(self) -> int:
        """Length of the body in bytes."""
        return len(self.body.getvalue().encode("utf-8", "surrogateescape"))

    def guess_content_type(self) -> str:
        """Guess a MIME type from the body; empty when the body is empty."""
        content = self.body.getvalue()
        if not content:
            return ""
        first = content[0]
        if first == "<":
            return "text/html"
        if "!" <= first <= "~":
            return "text/plain"
        return "application/octet-stream"


class HttpRequest(HttpMessage):
    """An HTTP request read from a connection."""

    def __init__(self, connection: Connection) -> None:
        super().__init__(connection)
        self.method = ""
        self.uri = ""

    def parse(self) -> bool:
        """Read the request line, the header and the body.

        Returns False when the request is malformed or the peer closed the
        connection before sending a whole request.
        """
        return (self._parse_request_line()
                and self._parse_header()
                and self._parse_body())

    def _parse_request_line(self) -> bool:
        line = self.connection.read_line()
        if line is None:
            return False
        fields = line.split()
        if len(fields) < 3:
            return False
        self.method, self.uri, self.http_version = fields[:3]
        return True

    def _parse_header(self) -> bool:
        while True:
            line = self.connection.read_line()
            if line is None:
                return False
            if line.endswith("\r"):
                line = line[:-1]
            if not line:
                return True
            key, colon, value = line.partition(":")
            if not colon:
                return False
            if value and value[0] in _C_WHITESPACE:
                value = value[1:]
            self.headers[key] = value

    def _parse_body(self) -> bool:
        value = self.get_header("Content-Length")
        if not value:
            return True
        match = _CONTENT_LENGTH.match(value)
        if match is None:
            return False
        size = int(match.group(1))
        try:
            data = self.connection.read(size)
        except (NetworkError, MemoryError, OverflowError):
            return False
        self.body = io.StringIO()
        self.body.write(data.decode("utf-8", "surrogateescape"))
        return True