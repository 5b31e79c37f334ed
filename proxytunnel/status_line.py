import re
from dataclasses import dataclass

from .errors import MalformedStatusLineError


_STATUS_LINE = re.compile(r"HTTP/(\S+)[ \t]+([0-9]{3})(?:[ \t](.*))?")


@dataclass(frozen=True)
class StatusLine:
    http_version: str
    status_code: int
    reason_phrase: str = ""

    @classmethod
    def create(cls, line: str | bytes | None) -> "StatusLine":
        status = parse_status_line(line)
        if status is None:
            raise MalformedStatusLineError(f"Invalid status line: {line!r}")
        return status

    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299

    def __str__(self) -> str:
        return f"HTTP/{self.http_version} {self.status_code} {self.reason_phrase}"


def parse_status_line(line: str | bytes | None) -> StatusLine | None:
    """
    Parses 'HTTP/<version> <code> <reason>' into a StatusLine.
    Returns None instead of raising for anything that does not match.
    """
    if not line:
        return None

    if isinstance(line, (bytes, bytearray, memoryview)):
        line = bytes(line).decode("iso-8859-1")

    if not isinstance(line, str):
        return None

    line = line.rstrip("\r\n")
    if "\r" in line or "\n" in line:
        return None

    match = _STATUS_LINE.fullmatch(line)
    if match is None:
        return None

    version, code, reason = match.groups()
    return StatusLine(http_version=version, status_code=int(code), reason_phrase=reason or "")
