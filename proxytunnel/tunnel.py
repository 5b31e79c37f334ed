import logging

from .config import ProxyConfig
from .errors import (
    TransportError,
    ResponseTooLargeError,
    ProxyRejectedError,
    EmptyProxyResponseError,
)
from .proxy_handler import ProxyHandler, ValidationFailure
from .proxy_response import Http1ProxyResponse
from .tcp_transport import TcpTransport
from .transport import Transport


logger = logging.getLogger(__name__)


def format_target(host: str, port: int) -> str:
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"{host}:{port}"


class TunnelTransport(Transport):
    """
    A transport to `host:port` that goes through an HTTP CONNECT proxy.
    Once connect() returns, reads and writes go straight through the tunnel.
    """

    _HEADER_SEPARATOR = b"\r\n\r\n"

    def __init__(self, config: ProxyConfig, transport: Transport | None = None,
                 handler: ProxyHandler | None = None):
        self._config = config
        self._transport: Transport = transport if transport is not None else TcpTransport(config.timeout)
        self._handler = handler if handler is not None else ProxyHandler()
        self._pending = bytearray()
        self._open = False
        self.response: Http1ProxyResponse | None = None

    def connect(self, host: str, port: int) -> None:
        if self._open:
            raise TransportError("Tunnel is already open.")

        target = format_target(host, port)
        self._transport.connect(self._config.host, self._config.port)

        try:
            request = self._handler.create_proxy_request_stream(target, self._config.headers)
            self._transport.write(request)
            logger.debug("Sent CONNECT %s to proxy %s:%s", target, self._config.host, self._config.port)

            self.response = self._read_proxy_response()
            result = self._handler.check_proxy_response(self.response)
        except Exception:
            self._transport.close()
            raise

        if not result.ok:
            self._transport.close()
            message = f"Proxy {self._config.host}:{self._config.port} refused CONNECT {target}: {result.diagnostic}"
            if result.failure is ValidationFailure.PROXY_REJECTED:
                raise ProxyRejectedError(message, result.status, result.failure, result.diagnostic)
            raise EmptyProxyResponseError(message, result.status, result.failure, result.diagnostic)

        self._pending = bytearray(self.response.contents() or b"")
        self._open = True
        logger.info("Tunnel to %s open via %s:%s (%s)", target, self._config.host, self._config.port, result.status)

    def write(self, data: bytes) -> int:
        if not self._open:
            raise TransportError("Cannot write on a tunnel that is not open.")
        return self._transport.write(data)

    def read_into(self, buffer: bytearray | memoryview) -> int:
        if not self._open:
            raise TransportError("Cannot read from a tunnel that is not open.")

        if self._pending:
            count = min(len(buffer), len(self._pending))
            buffer[:count] = self._pending[:count]
            del self._pending[:count]
            return count

        return self._transport.read_into(buffer)

    def close(self) -> None:
        self._open = False
        self._pending.clear()
        self._transport.close()

    def _read_proxy_response(self) -> Http1ProxyResponse:
        data = bytearray()
        chunk = bytearray(self._config.read_chunk_size)
        limit = self._config.max_response_size

        while True:
            bytes_read = self._transport.read_into(chunk)
            if bytes_read == 0:
                logger.debug("Proxy closed the connection after %d bytes", len(data))
                return Http1ProxyResponse.create(bytes(data))
            data += chunk[:bytes_read]

            # Bytes past the head belong to the tunnel and do not count.
            separator_pos = data.find(self._HEADER_SEPARATOR)
            head_size = len(data) if separator_pos == -1 else separator_pos + len(self._HEADER_SEPARATOR)
            if head_size > limit:
                raise ResponseTooLargeError(f"Proxy response head exceeds {limit} bytes.")
            if separator_pos != -1:
                break

        response = Http1ProxyResponse.create(bytes(data))
        status = response.status()
        if status is not None and status.is_success():
            return response

        received = len(data)
        while response.is_missing_content():
            bytes_read = self._transport.read_into(chunk)
            if bytes_read == 0:
                break
            received += bytes_read
            if received > limit:
                raise ResponseTooLargeError(f"Proxy response exceeds {limit} bytes.")
            response.add_content(bytes(chunk[:bytes_read]))

        return response
