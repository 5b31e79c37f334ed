import pytest
import socket
import threading


class ServerFixture:
    def __init__(self, handler):
        self._handler = handler
        self._should_stop = threading.Event()
        self.listener_sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.listener_sock.bind(("127.0.0.1", 0))
        self.port = self.listener_sock.getsockname()[1]
        self.listener_sock.listen()
        self.thread = threading.Thread(target=self._accept_loop)

    def start(self):
        self.thread.start()

    def stop(self):
        if not self._should_stop.is_set():
            self._should_stop.set()
            # Connect to unblock the accept() call
            try:
                socket.create_connection(("127.0.0.1", self.port), timeout=0.1).close()
            except OSError:
                pass
            self.thread.join(timeout=2.0)
            self.listener_sock.close()

    def _accept_loop(self):
        try:
            client_sock, _ = self.listener_sock.accept()
            with client_sock:
                if self._handler and not self._should_stop.is_set():
                    self._handler(client_sock)
        except OSError:
            pass


@pytest.fixture
def test_server(request):
    server = ServerFixture(request.param if hasattr(request, "param") else None)
    server.start()
    yield server
    server.stop()


def recv_request_head(sock: socket.socket) -> bytes:
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = sock.recv(1024)
        if not chunk:
            break
        data += chunk
    return data
