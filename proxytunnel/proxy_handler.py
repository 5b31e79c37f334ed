import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from .proxy_response import ProxyResponse
from .status_line import StatusLine


logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "<empty response>"


class ValidationFailure(Enum):
    MALFORMED_STATUS_LINE = "malformed_status_line"
    EMPTY_RESPONSE = "empty_response"
    INCOMPLETE_RESPONSE = "incomplete_response"
    PROXY_REJECTED = "proxy_rejected"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    status: StatusLine | None = None
    failure: ValidationFailure | None = None
    diagnostic: str | None = None

    def __bool__(self) -> bool:
        return self.ok


class ProxyHandler:
    _ENCODING = "iso-8859-1"

    def create_proxy_request(self, host: str, headers: Mapping[str, str]) -> str:
        return self.create_proxy_request_stream(host, headers).decode(self._ENCODING)

    def create_proxy_request_stream(self, host: str, headers: Mapping[str, str]) -> bytes:
        if not isinstance(host, str) or not host:
            raise ValueError("CONNECT host must be a non-empty string.")
        if not isinstance(headers, Mapping):
            raise TypeError("CONNECT headers must be a mapping of header names to values.")

        lines = [
            f"CONNECT {host} HTTP/1.1",
            f"Host: {host}",
            "Connection: Keep-Alive",
        ]
        lines.extend(f"{name}: {value}" for name, value in headers.items())

        logger.debug("Built CONNECT request for %s with headers %s", host, list(headers))
        return ("\r\n".join(lines) + "\r\n\r\n").encode(self._ENCODING)

    def validate_proxy_response(self, response: ProxyResponse) -> bool:
        return self.check_proxy_response(response).ok

    def check_proxy_response(self, response: ProxyResponse) -> ValidationResult:
        status = response.status()

        if status is None:
            result = self._classify_missing_status(response)
        elif status.is_success():
            return ValidationResult(ok=True, status=status)
        else:
            result = ValidationResult(
                ok=False,
                status=status,
                failure=ValidationFailure.PROXY_REJECTED,
                diagnostic=self._rejection_diagnostic(status, response),
            )

        logger.warning("Proxy CONNECT failed (%s): %r", result.failure.value, result.diagnostic)
        return result

    def _classify_missing_status(self, response: ProxyResponse) -> ValidationResult:
        error = response.error()
        body = _decode(response.contents())

        raw = error or body
        if response.is_missing_content():
            failure = ValidationFailure.INCOMPLETE_RESPONSE
        elif not raw or not raw.strip():
            failure = ValidationFailure.EMPTY_RESPONSE
        else:
            failure = ValidationFailure.MALFORMED_STATUS_LINE

        return ValidationResult(ok=False, failure=failure, diagnostic=raw or EMPTY_RESPONSE)

    def _rejection_diagnostic(self, status: StatusLine, response: ProxyResponse) -> str:
        summary = f"{status.status_code} {status.reason_phrase}".rstrip()

        details = []
        error = response.error()
        if error:
            details.append(error)
        body = _decode(response.contents())
        if body and (not error or body not in error):
            details.append(body)

        if not details:
            return summary
        return f"{summary}: " + "\n".join(details)


def _decode(contents: bytes | None) -> str | None:
    if contents is None:
        return None
    return bytes(contents).decode("utf-8", errors="replace")
