class ProxyTunnelError(Exception):
    """Base exception for the proxytunnel library."""
    pass

# --- Transport Errors ---

class TransportError(ProxyTunnelError):
    """A generic error occurred in the transport layer."""
    pass

class DnsFailureError(TransportError): pass
class SocketConnectError(TransportError): pass
class SocketWriteError(TransportError): pass
class SocketReadError(TransportError): pass
class ConnectionClosedError(TransportError): pass

# --- Proxy Protocol Errors ---

class ProxyProtocolError(ProxyTunnelError):
    """The proxy did not speak the CONNECT handshake we expected."""
    pass

class MalformedStatusLineError(ProxyProtocolError): pass
class ResponseTooLargeError(ProxyProtocolError): pass


class ProxyConnectError(ProxyProtocolError):
    """The proxy refused or failed to open the tunnel."""

    def __init__(self, message: str, status=None, failure=None, diagnostic: str | None = None):
        super().__init__(message)
        self.status = status
        self.failure = failure
        self.diagnostic = diagnostic

class ProxyRejectedError(ProxyConnectError): pass
class EmptyProxyResponseError(ProxyConnectError): pass

# --- Configuration Errors ---

class ConfigError(ProxyTunnelError):
    """The proxy configuration could not be loaded."""
    pass
