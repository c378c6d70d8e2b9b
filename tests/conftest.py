# conftest.py - Shared pytest fixtures for all tests
"""Shared pytest fixtures for the ScriptShell test suite.

This module provides:
- Captured rich consoles for asserting interpreter output
- A fake executor that records spawn/wait order without real processes
- A helper that builds command lines running the current Python
- A local TCP server that serves scripts over plain HTTP

Usage:
    Import fixtures implicitly via pytest's fixture discovery.
"""

from __future__ import annotations

import io
import socketserver
import sys
import threading
from pathlib import Path
from typing import Callable, Generator

import pytest
from rich.console import Console

from scriptshell.core.config import ShellConfig
from scriptshell.core.interpreter import Interpreter


# =============================================================================
# Console Fixtures
# =============================================================================


@pytest.fixture
def output() -> io.StringIO:
    """Buffer that receives everything the test console prints."""
    return io.StringIO()


@pytest.fixture
def console(output: io.StringIO) -> Console:
    """Plain-text rich console writing into the output buffer."""
    return Console(file=output, force_terminal=False, color_system=None, width=200)


def output_lines(output: io.StringIO) -> list[str]:
    return [line for line in output.getvalue().splitlines() if line]


@pytest.fixture
def lines() -> Callable[[io.StringIO], list[str]]:
    """Split captured console output into non-empty lines."""
    return output_lines


# =============================================================================
# Executor Fixtures
# =============================================================================


class FakeHandle:
    """Stand-in for ProcessHandle that records when it is waited on."""

    def __init__(self, argv: list[str], code: int, events: list[tuple[str, str]]):
        self.argv = argv
        self.code = code
        self.events = events
        self.spawn_error: str | None = None

    def wait(self) -> int:
        self.events.append(("wait", self.argv[0]))
        return self.code


class FakeExecutor:
    """Executor that never starts a process.

    Exit codes are looked up by command name (default 0). Every spawn and
    wait is appended to ``events`` in the order it happened.
    """

    def __init__(self, codes: dict[str, int] | None = None):
        self.codes = codes or {}
        self.events: list[tuple[str, str]] = []
        self.spawned: list[list[str]] = []

    def spawn(self, argv: list[str]) -> FakeHandle:
        self.events.append(("spawn", argv[0]))
        self.spawned.append(list(argv))
        return FakeHandle(list(argv), self.codes.get(argv[0], 0), self.events)

    def wait(self, handle: FakeHandle) -> int:
        return handle.wait()


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def fake_interpreter(console: Console, fake_executor: FakeExecutor) -> Interpreter:
    """Interpreter wired to the fake executor and the captured console."""
    return Interpreter(console=console, executor=fake_executor, config=ShellConfig())


@pytest.fixture
def interpreter(console: Console) -> Interpreter:
    """Interpreter that spawns real processes."""
    return Interpreter(console=console, config=ShellConfig())


@pytest.fixture
def python_line() -> Callable[[str], str]:
    """Build a command line that runs a Python snippet with the current interpreter.

    The snippet must not contain double quotes.

    Example:
        def test_exit(python_line):
            line = python_line("import sys; sys.exit(3)")
    """

    def build(code: str) -> str:
        return f'"{sys.executable}" -c "{code}"'

    return build


# =============================================================================
# Remote Script Server
# =============================================================================


class ScriptServer(socketserver.ThreadingTCPServer):
    """Minimal HTTP server returning canned responses by path.

    ``routes`` maps a path to a full raw response (bytes). Unknown paths get
    a 404. Every raw request received is kept in ``requests``.
    """

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), _ScriptRequestHandler)
        self.routes: dict[str, bytes] = {}
        self.requests: list[bytes] = []

    @property
    def port(self) -> int:
        return self.server_address[1]

    def url(self, path: str) -> str:
        return f"http://127.0.0.1:{self.port}{path}"

    def add_script(self, path: str, body: str, status: str = "200 OK") -> str:
        """Serve body at path with standard headers; returns the URL."""
        payload = body.encode("utf-8")
        self.routes[path] = (
            f"HTTP/1.1 {status}\r\n"
            "Content-Type: text/plain\r\n"
            f"Content-Length: {len(payload)}\r\n"
            "Connection: close\r\n"
            "\r\n"
        ).encode("ascii") + payload
        return self.url(path)


class _ScriptRequestHandler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        data = b""
        while b"\r\n\r\n" not in data:
            chunk = self.request.recv(4096)
            if not chunk:
                break
            data += chunk
        self.server.requests.append(data)

        request_line = data.split(b"\r\n", 1)[0].decode("ascii", errors="replace")
        parts = request_line.split()
        path = parts[1] if len(parts) > 1 else "/"
        response = self.server.routes.get(path)
        if response is None:
            response = b"HTTP/1.1 404 Not Found\r\nContent-Length: 9\r\n\r\nnot found"
        self.request.sendall(response)


@pytest.fixture
def script_server() -> Generator[ScriptServer, None, None]:
    """Local HTTP script server on 127.0.0.1 with an ephemeral port."""
    server = ScriptServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a script file under tmp_path and return its path."""

    def write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content)
        return path

    return write
