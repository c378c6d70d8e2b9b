"""Local process execution for interpreter commands.

Commands are started with subprocess.Popen and inherit the interpreter's
stdin/stdout/stderr. They are NOT sandboxed.

Spawning never raises for a bad command: an executable that cannot be found
yields a handle that completes with exit code 127, and one that cannot be
run (including arguments exec rejects, such as an embedded null byte)
completes with 126. Callers treat spawn failure the same as a command that
ran and failed.
"""

import logging
import os
import subprocess
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from scriptshell.core.models import ProcessState, ProcessStateError

logger = logging.getLogger(__name__)

# Shell conventions for commands that never started
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


@dataclass
class ProcessHandle:
    """One spawned command, convertible exactly once into an exit code."""

    argv: list[str]
    process: subprocess.Popen | None = None
    spawn_error: str | None = None
    state: ProcessState = ProcessState.RUNNING
    returncode: int | None = None

    @property
    def pid(self) -> int | None:
        return self.process.pid if self.process is not None else None

    def wait(self) -> int:
        """Block until the command terminates and return its exit code.

        Raises:
            ProcessStateError: If the handle was already waited on.
        """
        if self.state is ProcessState.EXITED:
            raise ProcessStateError(f"Process {self.argv[0]!r} was already waited on")

        if self.process is None:
            # A failed spawn carries its code from creation
            code = self.returncode if self.returncode is not None else EXIT_NOT_FOUND
        else:
            code = self.process.wait()

        self.returncode = code
        self.state = ProcessState.EXITED
        logger.debug(f"Process {self.argv[0]!r} (pid={self.pid}) exited with {code}")
        return code


@dataclass
class ProcessGroup:
    """Handles whose wait is deferred until a parallel script is exhausted.

    Owned by a single interpreter invocation; never shared between nested
    invocations.
    """

    handles: list[ProcessHandle] = field(default_factory=list)

    def add(self, handle: ProcessHandle) -> None:
        self.handles.append(handle)

    def __len__(self) -> int:
        return len(self.handles)

    def drain(self) -> Iterator[tuple[ProcessHandle, int]]:
        """Wait on every handle in the order added, yielding (handle, exit code)."""
        pending, self.handles = self.handles, []
        for handle in pending:
            yield handle, handle.wait()


class LocalExecutor:
    """Spawn commands as local child processes."""

    def __init__(self, workdir: str | Path | None = None, env: dict[str, str] | None = None):
        self.workdir = Path(workdir).absolute() if workdir else None
        self.env = env

    def spawn(self, argv: list[str]) -> ProcessHandle:
        """Start argv[0] with the remaining words as its arguments.

        Raises:
            ValueError: If argv is empty.
        """
        if not argv:
            raise ValueError("Cannot spawn an empty argument list")

        try:
            process = subprocess.Popen(argv, cwd=self.workdir, env=self._effective_env())
        except FileNotFoundError as e:
            return self._failed(argv, EXIT_NOT_FOUND, e)
        except OSError as e:
            return self._failed(argv, EXIT_NOT_EXECUTABLE, e)
        except ValueError as e:
            # Arguments Popen cannot pass to exec, e.g. an embedded null byte
            return self._failed(argv, EXIT_NOT_EXECUTABLE, e)

        logger.debug(f"Spawned {argv!r} as pid {process.pid}")
        return ProcessHandle(argv=list(argv), process=process)

    def wait(self, handle: ProcessHandle) -> int:
        """Block until the handle's command terminates and return its exit code."""
        return handle.wait()

    def _effective_env(self) -> dict[str, str] | None:
        if self.env is None:
            return None
        merged = dict(os.environ)
        merged.update(self.env)
        return merged

    def _failed(self, argv: list[str], code: int, error: OSError | ValueError) -> ProcessHandle:
        logger.warning(f"Failed to spawn {argv[0]!r}: {error}")
        return ProcessHandle(
            argv=list(argv),
            spawn_error=str(error),
            returncode=code,
        )
