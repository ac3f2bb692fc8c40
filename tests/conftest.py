"""
Shared pytest fixtures for the k3s-hello test suite.
"""
import logging
import os
import socket
import sys
import threading

import pytest

from k3s_hello.config.settings import Settings, reset_settings
from k3s_hello.server import HelloServer
from k3s_hello.utils.logging import setup_logging

LOCALHOST = "127.0.0.1"


# ── Ports ───────────────────────────────────────────────────────────────────

@pytest.fixture
def free_port():
    """A port that was free a moment ago on 127.0.0.1."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((LOCALHOST, 0))
        return s.getsockname()[1]


@pytest.fixture
def occupied_port():
    """A port held by a listening socket for the duration of the test."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((LOCALHOST, 0))
        s.listen(1)
        yield s.getsockname()[1]


# ── Settings ────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate every test from K3S_HELLO_* variables and the settings singleton."""
    for key in list(os.environ):
        if key.upper().startswith("K3S_HELLO_"):
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def configured_logging():
    """
    Route structlog to stderr for every test.

    Unconfigured structlog prints to stdout, which would mix with the
    startup lines the tests assert on. setup_logging() replaces the root
    handlers, so pytest's own handlers are put back afterwards.
    """
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    setup_logging(level="DEBUG", json_logs=True, stream=sys.stderr)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def local_settings():
    """Settings bound to an ephemeral port on localhost."""
    return Settings(host=LOCALHOST, port=0, _env_file=None)


# ── Running server ──────────────────────────────────────────────────────────

@pytest.fixture
def running_server(local_settings):
    """
    A HelloServer serving from a background thread.

    Yields the base URL; teardown shuts the loop down and closes the socket.
    """
    server = HelloServer(local_settings)
    server.bind()
    host, port = server.server_address
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://{host}:{port}"
    server.shutdown()
    thread.join(timeout=5)
    server.close()
