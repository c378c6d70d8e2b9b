"""Process execution for interpreter commands."""

from scriptshell.process.executor import LocalExecutor, ProcessGroup, ProcessHandle

__all__ = ["LocalExecutor", "ProcessGroup", "ProcessHandle"]
