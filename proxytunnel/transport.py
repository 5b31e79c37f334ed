from typing import Protocol


class Transport(Protocol):
    """
    A byte stream to one peer. TcpTransport reaches the proxy itself;
    TunnelTransport reaches the target through the proxy's CONNECT tunnel.
    """

    def connect(self, host: str, port: int) -> None:
        ...

    def write(self, data: bytes) -> int:
        """Sends all of `data` and returns its length."""
        ...

    def read_into(self, buffer: bytearray | memoryview) -> int:
        """Fills up to len(buffer) bytes. 0 means the peer closed the stream."""
        ...

    def close(self) -> None:
        """Safe to call more than once."""
        ...
