import logging
from typing import Protocol

from .status_line import StatusLine, parse_status_line


logger = logging.getLogger(__name__)


class ProxyResponse(Protocol):
    def status(self) -> StatusLine | None:
        ...

    def is_missing_content(self) -> bool:
        ...

    def contents(self) -> bytes | None:
        ...

    def error(self) -> str | None:
        ...


class Http1ProxyResponse(ProxyResponse):
    """A proxy's reply to a CONNECT request, parsed from the raw bytes read off the wire."""

    _HEADER_SEPARATOR = b"\r\n\r\n"

    def __init__(self, raw_head: bytes, status: StatusLine | None, headers: dict[str, list[str]],
                 body: bytes, head_complete: bool):
        self._raw_head = raw_head
        self._status = status
        self._headers = headers
        self._body = bytearray(body)
        self._head_complete = head_complete
        self._content_length = self._parse_content_length()

    @classmethod
    def create(cls, data: bytes) -> "Http1ProxyResponse":
        data = bytes(data)
        separator_pos = data.find(cls._HEADER_SEPARATOR)

        if separator_pos == -1:
            raw_head, body, head_complete = data, b"", False
        else:
            header_end = separator_pos + len(cls._HEADER_SEPARATOR)
            raw_head, body, head_complete = data[:header_end], data[header_end:], True

        lines = raw_head.decode("iso-8859-1").split("\r\n")
        status = parse_status_line(lines[0])

        headers: dict[str, list[str]] = {}
        if status is not None:
            for line in lines[1:]:
                if not line:
                    break
                name, colon, value = line.partition(":")
                if not colon:
                    continue
                headers.setdefault(name.strip().lower(), []).append(value.strip())

        return cls(raw_head, status, headers, body, head_complete)

    @property
    def headers(self) -> dict[str, list[str]]:
        return self._headers

    @property
    def head_complete(self) -> bool:
        return self._head_complete

    @property
    def content_length(self) -> int | None:
        return self._content_length

    def header(self, name: str) -> str | None:
        values = self._headers.get(name.lower())
        return values[0] if values else None

    def add_content(self, data: bytes) -> None:
        self._body += data

    def status(self) -> StatusLine | None:
        return self._status

    def is_missing_content(self) -> bool:
        if not self._head_complete:
            return True
        return self._content_length is not None and len(self._body) < self._content_length

    def contents(self) -> bytes | None:
        return bytes(self._body) if self._body else None

    def error(self) -> str | None:
        if self._status is None:
            raw = self._raw_head + self._body
            return raw.decode("utf-8", errors="replace") if raw else None
        if not self._body:
            return None
        return bytes(self._body).decode("utf-8", errors="replace")

    def _parse_content_length(self) -> int | None:
        value = self.header("content-length")
        if value is None:
            return None
        try:
            length = int(value)
        except ValueError:
            logger.debug("Ignoring invalid Content-Length value %r", value)
            return None
        return length if length >= 0 else None

    def __repr__(self) -> str:
        return (f"Http1ProxyResponse(status={self._status!r}, headers={sorted(self._headers)!r}, "
                f"body_length={len(self._body)})")
