"""Core modules for the ScriptShell interpreter."""

from scriptshell.core.models import (
    ConfigError,
    ExecutionMode,
    MalformedURLError,
    MissingScriptReferenceError,
    ProcessState,
    ProcessStateError,
    RemoteScriptError,
    ScriptShellError,
    ScriptURL,
)

__all__ = [
    "ConfigError",
    "ExecutionMode",
    "MalformedURLError",
    "MissingScriptReferenceError",
    "ProcessState",
    "ProcessStateError",
    "RemoteScriptError",
    "ScriptShellError",
    "ScriptURL",
]
