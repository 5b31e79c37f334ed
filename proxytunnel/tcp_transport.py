import logging
import socket

from .errors import (
    TransportError,
    DnsFailureError,
    SocketConnectError,
    SocketWriteError,
    SocketReadError,
)
from .transport import Transport


logger = logging.getLogger(__name__)


class TcpTransport(Transport):
    def __init__(self, timeout: float | None = None) -> None:
        self._sock: socket.socket | None = None
        self._timeout = timeout

    def connect(self, host: str, port: int) -> None:
        if self._sock is not None:
            raise TransportError("Transport is already connected.")

        try:
            self._sock = socket.create_connection((host, port), timeout=self._timeout)
            self._sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except socket.gaierror as e:
            self._sock = None
            raise DnsFailureError(f"DNS Failure for host '{host}'") from e
        except OSError as e:
            self._sock = None
            raise SocketConnectError(f"Socket connection failed: {e}") from e

        logger.debug("Connected to %s:%s", host, port)

    def write(self, data: bytes) -> int:
        if self._sock is None:
            raise TransportError("Cannot write on a disconnected transport.")

        try:
            self._sock.sendall(data)
        except OSError as e:
            raise SocketWriteError(f"Socket write failed: {e}") from e
        return len(data)

    def read_into(self, buffer: bytearray | memoryview) -> int:
        if self._sock is None:
            raise TransportError("Cannot read from a disconnected transport.")

        try:
            return self._sock.recv_into(buffer)
        except OSError as e:
            raise SocketReadError(f"Socket read failed: {e}") from e

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None
