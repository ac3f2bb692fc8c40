# Este es el servidor principal: carga la configuración, inicializa el logging,
# abre el listener en :8080 y sirve el saludo hasta que el proceso termina.

"""
k3s-hello HTTP server.

Binds a threaded HTTP listener (":8080" by default) and dispatches every
request to GreetingHandler.
"""
import sys
from http.server import ThreadingHTTPServer

from pydantic import ValidationError as PydanticValidationError

from .config.settings import Settings, get_settings
from .exceptions import BindError, ConfigurationError, ServeError
from .handler import GreetingHandler
from .utils.logging import setup_logging, get_logger

logger = get_logger(__name__)

# Exit status used when the listener fails and exit_on_error is enabled
EXIT_SERVE_ERROR = 2


class GreetingHTTPServer(ThreadingHTTPServer):
    """Thread-per-connection listener with a backlog sized for bursts of clients."""

    request_queue_size = 128


class HelloServer:
    """
    Explicit server object owning one listener and its handler class.

    Nothing is registered process-wide, so several instances can live in
    the same process (tests bind them to ephemeral ports).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        handler_class: type[GreetingHandler] = GreetingHandler
    ):
        self.settings = settings or get_settings()
        self.handler_class = handler_class
        self._httpd: GreetingHTTPServer | None = None

    @property
    def listen_address(self) -> str:
        return self.settings.listen_address

    @property
    def server_address(self) -> tuple[str, int]:
        """Actual (host, port) of the listener; only valid after bind()."""
        if self._httpd is None:
            raise ServeError("Server is not bound", context={"address": self.listen_address})
        return self._httpd.server_address[:2]

    def bind(self) -> None:
        """
        Open the listening socket.

        Raises:
            BindError: If the address cannot be bound (port in use,
                insufficient privilege, unknown host)
        """
        if self._httpd is not None:
            return

        address = (self.settings.host, self.settings.port)
        try:
            httpd = GreetingHTTPServer(address, self.handler_class, bind_and_activate=False)
        except OSError as e:
            raise BindError(
                f"listen tcp {self.listen_address}: {e}",
                context={"address": self.listen_address}
            ) from e

        try:
            httpd.server_bind()
            httpd.server_activate()
        except OSError as e:
            httpd.server_close()
            reason = (e.strerror or str(e)).lower()
            raise BindError(
                f"listen tcp {self.listen_address}: bind: {reason}",
                context={"address": self.listen_address, "errno": e.errno}
            ) from e

        self._httpd = httpd

    def serve_forever(self) -> None:
        """
        Serve requests on the calling thread until shutdown() is called.

        Raises:
            BindError: If the listener was not bound yet and binding fails
            ServeError: If the serve loop terminates abnormally
        """
        self.bind()
        try:
            self._httpd.serve_forever()
        except OSError as e:
            raise ServeError(
                f"accept tcp {self.listen_address}: {e}",
                context={"address": self.listen_address}
            ) from e

    def shutdown(self) -> None:
        """Stop a serve_forever() loop running in another thread."""
        if self._httpd is not None:
            self._httpd.shutdown()

    def close(self) -> None:
        """Close the listening socket."""
        if self._httpd is not None:
            self._httpd.server_close()
            self._httpd = None

    def __enter__(self) -> "HelloServer":
        self.bind()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def start(settings: Settings | None = None) -> None:
    """
    Announce, bind and serve until the process is terminated.

    Args:
        settings: Server settings (default: process singleton)

    Raises:
        BindError: If the listener cannot be established
        ServeError: If the serve loop terminates abnormally
    """
    settings = settings or get_settings()

    print(f"Starting server on {settings.listen_address}", flush=True)
    logger.info(
        "server_starting",
        server_name=settings.server_name,
        address=settings.listen_address
    )

    server = HelloServer(settings)
    try:
        server.bind()
        host, port = server.server_address
        logger.info("server_listening", host=host, port=port)
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("server_stopped", reason="keyboard_interrupt")
    finally:
        server.close()


def _load_settings() -> Settings:
    try:
        return get_settings()
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"invalid configuration: {e.error_count()} error(s)",
            context={"errors": [err["msg"] for err in e.errors()]}
        ) from e


def main() -> None:
    """
    Process entry point.

    Can be invoked via:
    - k3s-hello (console script)
    - python -m k3s_hello
    """
    try:
        settings = _load_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.error("configuration_error", error=str(e), **e.context)
        print(f"Error starting server: {e}", flush=True)
        sys.exit(EXIT_SERVE_ERROR)

    setup_logging(level=settings.log_level, json_logs=settings.log_json)

    try:
        start(settings)
    except ServeError as e:
        logger.error("server_error", error=str(e), **e.context)
        print(f"Error starting server: {e}", flush=True)
        if settings.exit_on_error:
            sys.exit(EXIT_SERVE_ERROR)


if __name__ == "__main__":
    main()
