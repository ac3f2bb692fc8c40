# Este archivo implementa el handler HTTP que responde "Hello, K3s!" a cualquier
# método y ruta.

"""
Greeting request handler.

Every request, whatever its method, path, headers or body, gets a
200 response whose body is exactly GREETING.
"""
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler

from .utils.logging import get_logger

logger = get_logger(__name__)

GREETING = "Hello, K3s!"
GREETING_BYTES = GREETING.encode("utf-8")
CONTENT_TYPE = "text/plain; charset=utf-8"

# Larger unread bodies close the connection instead of being drained
MAX_DISCARD_BYTES = 256 * 1024


class GreetingHandler(BaseHTTPRequestHandler):
    """Answers every request with the static greeting."""

    protocol_version = "HTTP/1.1"

    def do_GET(self) -> None:
        self._send_greeting(include_body=True)

    do_POST = do_PUT = do_DELETE = do_PATCH = do_OPTIONS = do_GET

    def do_HEAD(self) -> None:
        self._send_greeting(include_body=False)

    def __getattr__(self, name: str):
        # http.server looks up do_<METHOD>; extension methods (PROPFIND, ...)
        # get the same answer instead of a 501.
        if name.startswith("do_"):
            return self.do_GET
        raise AttributeError(name)

    def send_response(self, code, message=None) -> None:
        # Status line and Date only, no Server header
        self.log_request(code)
        self.send_response_only(code, message)
        self.send_header("Date", self.date_time_string())

    def _send_greeting(self, include_body: bool) -> None:
        # The response goes out before the body is read; a slow or missing
        # body only delays the next request on this connection.
        try:
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-Type", CONTENT_TYPE)
            self.send_header("Content-Length", str(len(GREETING_BYTES)))
            self.end_headers()
            if include_body:
                self.wfile.write(GREETING_BYTES)
        except (BrokenPipeError, ConnectionResetError) as e:
            self.close_connection = True
            logger.debug(
                "response_write_failed",
                client=self.address_string(),
                error=str(e)
            )
            return
        self._discard_body()

    def _discard_body(self) -> None:
        """Drain the request body so the connection can carry the next request."""
        if "chunked" in self.headers.get("Transfer-Encoding", "").lower():
            self.close_connection = True
            return

        length = self.headers.get("Content-Length")
        if not length:
            return

        try:
            remaining = int(length)
        except ValueError:
            self.close_connection = True
            return

        if remaining < 0 or remaining > MAX_DISCARD_BYTES:
            self.close_connection = True
            return

        while remaining > 0:
            chunk = self.rfile.read(min(remaining, 64 * 1024))
            if not chunk:
                self.close_connection = True
                break
            remaining -= len(chunk)

    def log_request(self, code="-", size="-") -> None:
        if isinstance(code, HTTPStatus):
            code = code.value
        logger.debug(
            "request_served",
            method=self.command,
            path=self.path,
            status=code,
            client=self.address_string()
        )

    def log_message(self, format: str, *args) -> None:
        logger.debug(
            "http_server_message",
            client=self.address_string(),
            message=format % args
        )
