# primeweb

Building blocks for a small HTTP server that factorizes integers into
primes: a prime factorization model, buffered TCP connections, a TCP
client, a TCP server, and HTTP request, response and server classes.

## Installation

```
pip install .
```

## Prime factorization

`primeweb.factorization` works without any networking.

```python
from primeweb.factorization import Factorization, calculate_factors, prime_factors

print(prime_factors(360))    # [(2, 3), (3, 2), (5, 1)]
print(prime_factors(1))      # []

entry = Factorization("360")
calculate_factors(entry)
print(entry.to_html())       # "    <li>360: 2^3 * 3^2 * 5</li>"
```

`Factorization(text, job)` reads the text as a signed 64-bit integer.
The entry is valid only when the text is exactly a whole number of 2 or
more; `calculate_factors` then fills in its `factors` as (prime, power)
pairs. `to_html()` renders an `<li>` item: valid entries show their
factors joined by ` * `, with powers above 1 written as `^n`; `0` and `1`
show `NA`; negative numbers, text that is not a number (such as `25abc`),
and values outside the 64-bit range show `error` in an `<li class='err'>`.
The optional `job` argument is stored as is on the `job` attribute.

## Connections and TCP

`primeweb.connection.Connection` wraps a connected socket. Values given
to `write()` collect in an output buffer until `send()`; `read_line()`,
`read_available()` and `read()` read through an input buffer.
`NetworkAddress` holds an IP and a port, and failures raise
`NetworkError`.

`primeweb.tcp_client.TcpClient` opens a connection with a server:

```python
from primeweb.tcp_client import TcpClient

with TcpClient() as client:
    connection = client.connect("127.0.0.1", 8080)
    connection.write("GET / HTTP/1.0\r\n", "Host: 127.0.0.1\r\n\r\n")
    connection.send()
    while (line := connection.read_line()) is not None:
        print(line)
```

`primeweb.tcp_server.TcpServer` listens on a port and hands each accepted
connection to its abstract `handle_client_connection()`. `kill_server()`
makes the accept loop stop with a `NetworkError` and closes the active
client connections.

## HTTP

`primeweb.http_message` provides `Headers` (case-insensitive keys),
`HttpMessage` and `HttpRequest`, whose `parse()` reads the request line,
the header fields and a body of `Content-Length` bytes.
`primeweb.http_response.HttpResponse` sets the status with
`set_status_code()`, writes to its `body` text buffer and sends it all
with `send()`. `primeweb.http_server.HttpServer` reads one request per
connection and calls the abstract `handle_http_request()`:

```python
from primeweb.factorization import Factorization, calculate_factors
from primeweb.http_server import HttpServer


class FactorServer(HttpServer):
    def handle_http_request(self, request, response):
        entry = Factorization(request.uri.lstrip("/"))
        calculate_factors(entry)
        response.set_header("Content-Type", "text/html")
        response.body.write("<ul>\n" + entry.to_html() + "\n</ul>\n")
        return response.send()


FactorServer().listen_forever(8080)
```

After the handler returns, the connection is closed unless the response
was marked with `keep_connection_alive()` and the request did not use
HTTP/1.0.

## What the package does not do

The package has no command to run and no ready-made factorization web
application: there is no home page, no route that parses lists of numbers
from a URI, no pool of worker threads computing factorizations, and no
forwarding of requests to child servers. A server is built by subclassing
`HttpServer` as shown above.

## Tests

```
pip install .[test]
pytest
```