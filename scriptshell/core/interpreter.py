"""Line interpreter that runs commands and nested scripts.

Each call to Interpreter.process() reads lines from one stream until EOF or
the exit command:

- Blank lines and comments are skipped.
- "SERIAL <ref>" / "PARALLEL <ref>" open the referenced script (local file
  or http:// URL) and process it recursively in the named mode. The calling
  line does not advance until the nested script, including its own drain,
  has finished.
- Anything else is a command. In serial mode it is awaited immediately; in
  parallel mode its handle is kept in this call's ProcessGroup and all
  handles are awaited, in spawn order, once the input is exhausted.
"""

import logging
from typing import TextIO

from rich.console import Console
from rich.markup import escape

from scriptshell.core.config import ShellConfig
from scriptshell.core.models import (
    ExecutionMode,
    MissingScriptReferenceError,
    ScriptShellError,
)
from scriptshell.core.sources import open_script
from scriptshell.core.tokenizer import split
from scriptshell.process.executor import LocalExecutor, ProcessGroup

logger = logging.getLogger(__name__)


class Interpreter:
    """Runs command lines and SERIAL/PARALLEL scripts.

    USAGE:
        interpreter = Interpreter(console=Console())
        interpreter.process(sys.stdin, prompt="> ")
        interpreter.run_script("http://example.org/build.txt", ExecutionMode.PARALLEL)
    """

    def __init__(
        self,
        console: Console | None = None,
        executor: LocalExecutor | None = None,
        config: ShellConfig | None = None,
    ):
        self.config = config or ShellConfig()
        self.console = console or Console()
        self.executor = executor or LocalExecutor(
            workdir=self.config.workdir,
            env=self.config.env or None,
        )

    def process(
        self,
        stream: TextIO,
        prompt: str = "",
        mode: ExecutionMode = ExecutionMode.SERIAL,
    ) -> list[int]:
        """Run every line of stream until EOF or the exit command.

        Returns:
            Exit codes of the commands spawned directly by this call, in
            the order they were reported. Nested scripts report their own.
        """
        group = ProcessGroup()
        exit_codes: list[int] = []

        try:
            while True:
                if prompt:
                    self._print(prompt, end="")

                raw = stream.readline()
                if not raw:
                    break

                line = raw.rstrip("\r\n")
                if line.strip() == self.config.exit_command:
                    break
                if not line.strip() or line.startswith(self.config.comment_prefix):
                    continue

                self._dispatch(split(line), mode, group, exit_codes)
        finally:
            # Drain once, after the loop, even if reading the stream failed
            for _handle, code in group.drain():
                self._report_exit(code, exit_codes)

        return exit_codes

    def run_script(self, reference: str, mode: ExecutionMode) -> bool:
        """Open a script reference and process it without a prompt.

        Errors opening or reading the script are reported to the console and
        do not propagate.

        Returns:
            True if the script ran to completion, False if it was rejected.
        """
        logger.debug(f"Running {mode.value} script {reference!r}")
        try:
            with open_script(
                reference,
                remote_prefix=self.config.remote_prefix,
                timeout=self.config.connect_timeout,
            ) as stream:
                self.process(stream, "", mode)
        except (ScriptShellError, OSError) as e:
            logger.error(f"Script {reference!r} failed: {e}")
            self._report_error(str(e))
            return False
        return True

    def _dispatch(
        self,
        words: list[str],
        mode: ExecutionMode,
        group: ProcessGroup,
        exit_codes: list[int],
    ) -> None:
        verb = words[0]
        nested_mode = self._verb_mode(verb)
        if nested_mode is not None:
            try:
                reference = self._script_reference(words)
            except MissingScriptReferenceError as e:
                self._report_error(str(e))
                return
            self.run_script(reference, nested_mode)
            return

        self._print("Running: " + " ".join(words))
        handle = self.executor.spawn(words)
        if handle.spawn_error:
            self._report_error(f"Cannot run {words[0]!r}: {handle.spawn_error}")
        if mode is ExecutionMode.PARALLEL:
            group.add(handle)
        else:
            self._report_exit(self.executor.wait(handle), exit_codes)

    def _verb_mode(self, verb: str) -> ExecutionMode | None:
        if verb == self.config.serial_verb:
            return ExecutionMode.SERIAL
        if verb == self.config.parallel_verb:
            return ExecutionMode.PARALLEL
        return None

    def _script_reference(self, words: list[str]) -> str:
        if len(words) < 2:
            raise MissingScriptReferenceError(f"{words[0]} requires a script reference")
        if len(words) > 2:
            logger.debug(f"Ignoring extra arguments after script reference: {words[2:]!r}")
        return words[1]

    def _report_exit(self, code: int, exit_codes: list[int]) -> None:
        exit_codes.append(code)
        self._print(f"Exit code: {code}")

    def _report_error(self, message: str) -> None:
        self.console.print(
            f"[red]Error:[/red] {escape(message)}", highlight=False, emoji=False, soft_wrap=True
        )

    def _print(self, text: str, end: str = "\n") -> None:
        """Print text verbatim: no markup, emoji codes or highlighting."""
        self.console.print(
            text, end=end, markup=False, emoji=False, highlight=False, soft_wrap=True
        )
