"""Script source resolution for nested SERIAL/PARALLEL scripts.

A script reference is either a local path or a plain-HTTP URL. Both are
opened as a readable line stream (anything with ``readline()``):

- Local paths are opened as text files. A file that cannot be opened is an
  empty script, not an error.
- URLs are fetched over a raw TCP connection with a minimal HTTP/1.1
  request. Response headers are consumed so the stream starts at the body.
"""

import io
import logging
import socket
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import TextIO

from scriptshell.core.models import MalformedURLError, RemoteScriptError, ScriptURL

logger = logging.getLogger(__name__)

REMOTE_PREFIX = "http://"
DEFAULT_PORT = "80"
DEFAULT_TIMEOUT = 10.0


def is_remote(reference: str, prefix: str = REMOTE_PREFIX) -> bool:
    """Return True if the reference names a remote script.

    Only the literal prefix is checked. Anything else, typos included, is a
    local path.
    """
    return reference.startswith(prefix)


def resolve_url(url: str) -> ScriptURL:
    """Break a URL down into host, port and path.

    Given "http://localhost:8080/a/b.txt" this returns
    host="localhost", port="8080", path="/a/b.txt". The port defaults to
    "80" when absent.

    Raises:
        MalformedURLError: If there is no "//" marker, no path after the
            host, or an empty host.
    """
    marker = url.find("//")
    if marker == -1:
        raise MalformedURLError(f"Malformed URL '{url}': missing '//' before host")

    host_start = marker + 2
    path_start = url.find("/", host_start)
    if path_start == -1:
        raise MalformedURLError(f"Malformed URL '{url}': missing path after host")

    port_pos = url.find(":", host_start, path_start)
    if port_pos == -1:
        host = url[host_start:path_start]
        port = DEFAULT_PORT
    else:
        host = url[host_start:port_pos]
        port = url[port_pos + 1 : path_start]

    if not host:
        raise MalformedURLError(f"Malformed URL '{url}': empty host")

    return ScriptURL(host=host, port=port, path=url[path_start:])


def _build_request(target: ScriptURL) -> bytes:
    request = (
        f"GET {target.path} HTTP/1.1\r\n"
        f"Host: {target.host}\r\n"
        "Connection: Close\r\n"
        "\r\n"
    )
    return request.encode("utf-8")


def _check_status_line(url: str, status_line: str) -> None:
    """Reject responses that are not 2xx so error pages never run as commands."""
    parts = status_line.split(None, 2)
    if len(parts) < 2 or not parts[0].startswith("HTTP/") or not parts[1].isdigit():
        raise RemoteScriptError(f"Invalid HTTP response from {url}: {status_line.strip()!r}")

    status = int(parts[1])
    if not 200 <= status < 300:
        raise RemoteScriptError(f"Fetching {url} failed with HTTP status {status}")


def _skip_headers(stream: TextIO) -> None:
    """Consume header lines up to and including the first blank line."""
    for header in iter(stream.readline, ""):
        if header in ("\n", "\r\n", "\r"):
            return


@contextmanager
def open_remote(url: str, timeout: float = DEFAULT_TIMEOUT) -> Iterator[TextIO]:
    """Open a remote script, yielding a stream positioned at the response body.

    Raises:
        MalformedURLError: If the URL cannot be broken down.
        RemoteScriptError: On connection failure or a non-2xx response.
    """
    target = resolve_url(url)
    try:
        port = int(target.port)
    except ValueError:
        raise MalformedURLError(f"Malformed URL '{url}': invalid port '{target.port}'") from None

    logger.debug(f"Connecting to {target.host}:{port} for {target.path}")
    try:
        sock = socket.create_connection((target.host, port), timeout=timeout)
    except OSError as e:
        raise RemoteScriptError(f"Cannot connect to {target.host}:{port}: {e}") from e

    try:
        with sock.makefile("r", encoding="utf-8", errors="replace", newline="") as stream:
            try:
                sock.sendall(_build_request(target))
                _check_status_line(url, stream.readline())
                _skip_headers(stream)
            except OSError as e:
                raise RemoteScriptError(f"Error reading {url}: {e}") from e
            yield stream
    finally:
        sock.close()


@contextmanager
def open_local(path: str | Path) -> Iterator[TextIO]:
    """Open a local script file.

    A file that cannot be opened yields an empty stream, so the script runs
    as a no-op.
    """
    try:
        script = open(path, encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"Cannot open script '{path}': {e}; treating it as empty")
        yield io.StringIO("")
        return

    with script:
        yield script


def open_script(
    reference: str,
    *,
    remote_prefix: str = REMOTE_PREFIX,
    timeout: float = DEFAULT_TIMEOUT,
) -> AbstractContextManager[TextIO]:
    """Open a script reference as a line stream, local or remote."""
    if is_remote(reference, remote_prefix):
        return open_remote(reference, timeout=timeout)
    return open_local(reference)
