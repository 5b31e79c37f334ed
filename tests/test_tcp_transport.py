import pytest
import socket
import threading
from queue import Queue


from unittest.mock import patch


from proxytunnel.tcp_transport import TcpTransport
from proxytunnel.errors import (
    SocketConnectError,
    DnsFailureError,
    TransportError,
    SocketReadError
)
from conftest import recv_request_head


CONNECT_REQUEST = b"CONNECT example.com:443 HTTP/1.1\r\nHost: example.com:443\r\n\r\n"
ESTABLISHED = b"HTTP/1.1 200 Connection established\r\n\r\n"


def closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_connect_exchange(test_server):
    request_queue = Queue()

    def proxy(sock):
        request_queue.put(recv_request_head(sock))
        sock.sendall(ESTABLISHED)

    test_server._handler = proxy

    transport = TcpTransport(timeout=2.0)
    transport.connect("127.0.0.1", test_server.port)

    assert transport.write(CONNECT_REQUEST) == len(CONNECT_REQUEST)
    assert request_queue.get(timeout=1) == CONNECT_REQUEST

    buffer = bytearray(128)
    bytes_read = transport.read_into(buffer)
    assert buffer[:bytes_read] == ESTABLISHED

    transport.close()
    transport.close()


def test_write_sends_oversized_request_in_full(test_server):
    size_queue = Queue()
    request = (b"CONNECT example.com:443 HTTP/1.1\r\n"
               b"Proxy-Authorization: Negotiate " + b"Y" * 262144 + b"\r\n\r\n")

    def proxy(sock):
        size_queue.put(len(recv_request_head(sock)))

    test_server._handler = proxy

    transport = TcpTransport(timeout=2.0)
    transport.connect("127.0.0.1", test_server.port)

    assert transport.write(request) == len(request)
    assert size_queue.get(timeout=2) == len(request)
    transport.close()


def test_read_into_returns_zero_when_proxy_hangs_up(test_server):
    test_server._handler = recv_request_head

    transport = TcpTransport(timeout=2.0)
    transport.connect("127.0.0.1", test_server.port)
    transport.write(CONNECT_REQUEST)

    assert transport.read_into(bytearray(64)) == 0
    transport.close()


def test_read_into_times_out_waiting_for_proxy(test_server):
    release = threading.Event()

    def silent_proxy(sock):
        recv_request_head(sock)
        release.wait(timeout=2)

    test_server._handler = silent_proxy

    transport = TcpTransport(timeout=0.1)
    transport.connect("127.0.0.1", test_server.port)
    transport.write(CONNECT_REQUEST)

    try:
        with pytest.raises(SocketReadError):
            transport.read_into(bytearray(16))
    finally:
        release.set()
        transport.close()


@pytest.mark.parametrize("test_server", [lambda sock: None], indirect=True)
def test_connect_twice_fails(test_server):
    transport = TcpTransport()
    transport.connect("127.0.0.1", test_server.port)

    with pytest.raises(TransportError, match="already connected"):
        transport.connect("127.0.0.1", test_server.port)

    transport.close()


def test_connect_refused_maps_to_socket_connect_error():
    with pytest.raises(SocketConnectError):
        TcpTransport(timeout=1.0).connect("127.0.0.1", closed_port())


def test_unresolvable_proxy_maps_to_dns_failure():
    with pytest.raises(DnsFailureError, match="proxy.invalid"):
        TcpTransport(timeout=1.0).connect("proxy.invalid", 3128)


@pytest.mark.parametrize("operation", [
    lambda transport: transport.write(CONNECT_REQUEST),
    lambda transport: transport.read_into(bytearray(16)),
])
def test_io_requires_connection(operation):
    with pytest.raises(TransportError, match="disconnected transport"):
        operation(TcpTransport())


@pytest.mark.parametrize("test_server", [lambda sock: None], indirect=True)
def test_os_error_on_read_maps_to_socket_read_error(test_server):
    transport = TcpTransport()
    transport.connect("127.0.0.1", test_server.port)

    with patch('socket.socket.recv_into', side_effect=OSError("connection reset by proxy")):
        with pytest.raises(SocketReadError, match="connection reset by proxy"):
            transport.read_into(bytearray(16))

    transport.close()
