from .proxy_handler import ProxyHandler, ValidationFailure, ValidationResult
from .proxy_response import Http1ProxyResponse, ProxyResponse
from .status_line import StatusLine, parse_status_line
from .tunnel import TunnelTransport

__all__ = [
    "Http1ProxyResponse",
    "ProxyHandler",
    "ProxyResponse",
    "StatusLine",
    "TunnelTransport",
    "ValidationFailure",
    "ValidationResult",
    "parse_status_line",
]
