"""ScriptShell - minimal command interpreter.

Runs external commands line by line, with SERIAL and PARALLEL verbs that
pull in nested scripts from local files or plain-HTTP URLs.
"""

__version__ = "0.1.0"
