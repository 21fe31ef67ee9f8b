import socket

import pytest

from primeweb.connection import Connection, NetworkAddress, NetworkError

PEER = NetworkAddress("127.0.0.1", 9)


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    a.settimeout(5)
    b.settimeout(5)
    conn = Connection(a, PEER)
    yield conn, b
    a.close()
    b.close()


def test_from_sockaddr_ipv4():
    address = NetworkAddress.from_sockaddr(("127.0.0.1", 8080))
    assert address.ip == "127.0.0.1"
    assert address.port == 8080


def test_from_sockaddr_ipv6_drops_scope():
    address = NetworkAddress.from_sockaddr(("fe80::1%lo", 8081, 0, 1))
    assert address.ip == "fe80::1"
    assert address.port == 8081


@pytest.mark.parametrize("bad", ["", b"", ("not-an-ip", 80), ("127.0.0.1",), None])
def test_from_sockaddr_rejects_other_addresses(bad):
    with pytest.raises(ValueError):
        NetworkAddress.from_sockaddr(bad)


def test_port_out_of_range():
    with pytest.raises(ValueError):
        NetworkAddress("127.0.0.1", 70000)


def test_unix_socket_has_no_peer():
    a, b = socket.socketpair()
    try:
        assert Connection(a).peer is None
    finally:
        a.close()
        b.close()


def test_write_then_send(pair):
    conn, other = pair
    conn.write("GET /fact?number=", 12, " HTTP/1.1\r\n")
    assert conn.send() is True
    assert other.recv(100) == b"GET /fact?number=12 HTTP/1.1\r\n"


def test_write_bool_and_bytes(pair):
    conn, other = pair
    conn.write(True, False, b"\x00")
    conn.send()
    assert other.recv(100) == b"10\x00"


def test_send_clears_output(pair):
    conn, other = pair
    conn.write("first").send()
    conn.write("second").send()
    other.shutdown(socket.SHUT_WR)
    received = b""
    conn.close()
    while chunk := other.recv(100):
        received += chunk
    assert received == b"firstsecond"


def test_read_line_splits_and_keeps_carriage_return(pair):
    conn, other = pair
    other.sendall(b"GET / HT")
    other.sendall(b"TP/1.1\r\nHost: x\r\n\r\n")
    assert conn.read_line() == "GET / HTTP/1.1\r"
    assert conn.read_line() == "Host: x\r"
    assert conn.read_line() == "\r"


def test_read_line_returns_unterminated_tail_then_none(pair):
    conn, other = pair
    other.sendall(b"alpha\nomega")
    other.close()
    assert conn.read_line() == "alpha"
    assert conn.read_line() == "omega"
    assert conn.read_line() is None
    assert not conn


def test_read_line_custom_separator(pair):
    conn, other = pair
    other.sendall(b"12,35,7,")
    assert [conn.read_line(","), conn.read_line(","), conn.read_line(",")] == [
        "12", "35", "7"]


def test_read_uses_buffered_data_first(pair):
    conn, other = pair
    other.sendall(b"Content-Length: 5\n\nhel")
    assert conn.read_line() == "Content-Length: 5"
    assert conn.read_line() == ""
    other.sendall(b"lo")
    assert conn.read(5) == b"hello"


def test_read_zero_bytes(pair):
    conn, _ = pair
    assert conn.read(0) == b""


def test_read_raises_when_peer_closes_early(pair):
    conn, other = pair
    other.sendall(b"abc")
    other.close()
    with pytest.raises(NetworkError):
        conn.read(10)


def test_read_available_empty_on_peer_close(pair):
    conn, other = pair
    other.close()
    assert conn.read_available(16) == b""


def test_receive_false_on_peer_close(pair):
    conn, other = pair
    other.close()
    assert conn.receive() is False


def test_close_reports_and_is_idempotent(pair, capsys):
    conn, _ = pair
    assert conn.fileno() >= 0
    assert conn
    conn.close()
    conn.close()
    assert conn.fileno() == -1
    assert not conn
    assert conn.send() is False
    out = capsys.readouterr().out
    assert out.count("connection -----closed with peer 127.0.0.1 port 9") == 1


def test_read_available_after_close_raises(pair):
    conn, _ = pair
    conn.close()
    with pytest.raises(NetworkError):
        conn.read_available(4)


def test_equality_and_ordering_follow_fileno(pair):
    conn, other = pair
    second = Connection(other, PEER)
    same = Connection(socket.socket(fileno=socket.dup(conn.fileno())), PEER)
    try:
        assert (conn < second) == (conn.fileno() < second.fileno())
        assert (conn == second) is False
        assert conn == conn
        assert same != conn
    finally:
        same.close()


def test_connections_sharing_socket_are_equal():
    a, b = socket.socketpair()
    try:
        first = Connection(a, PEER)
        second = Connection(a, PEER)
        assert first.fileno() == a.fileno()
        assert second.fileno() == a.fileno()
        assert (first == second) is True
        assert (first < second) is False
    finally:
        a.close()
        b.close()