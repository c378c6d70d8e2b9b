"""Data models and exceptions shared across the interpreter."""

from enum import Enum

from pydantic import BaseModel


class ExecutionMode(str, Enum):
    """How generic commands of one script invocation are awaited."""

    SERIAL = "serial"
    PARALLEL = "parallel"


class ProcessState(str, Enum):
    """Lifecycle state of a spawned command."""

    RUNNING = "running"
    EXITED = "exited"


class ScriptURL(BaseModel):
    """A remote script reference broken down into its parts."""

    host: str
    port: str = "80"
    path: str = "/"


class ScriptShellError(Exception):
    """Base class for interpreter errors."""

    pass


class MalformedURLError(ScriptShellError):
    """Script URL is missing the '//' marker or a path."""

    pass


class RemoteScriptError(ScriptShellError):
    """Remote script could not be fetched."""

    pass


class MissingScriptReferenceError(ScriptShellError):
    """Composite verb used without a script reference."""

    pass


class ProcessStateError(ScriptShellError):
    """Process handle was waited on more than once."""

    pass


class ConfigError(ScriptShellError):
    """Configuration file is invalid."""

    pass
