"""Error handling for the Minimus language. Only MinimusFaults should be encountered while compiling or running a
program: if another type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal
issue.

Fault taxonomy:
    - LexicalFault: unrecognized character, malformed operator or malformed identifier
    - SyntaxFault: expected-token mismatch, trailing input after the program, unterminated block, nesting too deep
    - SemanticFault: undefined variable, division by zero
    - InternalInvariantFault: node/operator mismatches that a valid grammar never produces (a bug, not a user error)
"""

import sys

from termcolor import colored


class MinimusFault(Exception):
    """Templates a fault message so that it can be used to abort a Minimus run. exprs are substituted into msg with
    str.format, line is the 1-based source line the fault was detected on (None if unknown).
    """
    internal = False

    def __init__(self, msg, exprs=None, line=None):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*exprs)
        self.exprs = list(exprs)
        self.line = line
        super().__init__(self.msg)

    @property
    def kind(self):
        """Name of this fault's taxonomy class."""
        return type(self).__name__

    def __str__(self):
        if self.line is None:
            return self.msg
        return f"{self.msg} (line {self.line})"


class LexicalFault(MinimusFault):
    """Raised by the lexer."""


class SyntaxFault(MinimusFault):
    """Raised by the parser."""


class SemanticFault(MinimusFault):
    """Raised by the interpreter for undefined variables and division by zero."""


class InternalInvariantFault(MinimusFault):
    """Raised when the AST or the interpreter reach a state a valid grammar cannot produce."""
    internal = True


class ErrorHandler:
    """Context manager that reports MinimusFaults (and suppresses them when not fatal)."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, source, line_num=1):
        """Registers source (possibly several lines) given path. line_num is the line source starts on. Should be
        called prior to Session add/run.
        """
        self.traceback[path] = (source.splitlines(), line_num)

    def remove_line(self, path):
        """Removes source from traceback given path. Should be called after a successful Session add/run."""
        self.traceback[path] = (None, None)

    def locate(self, line=None):
        """Returns (file, absolute line number, source line) for a fault line relative to the registered source."""
        if not self.traceback:
            return None, None, None

        file, (lines, line_num) = next(iter(self.traceback.items()))
        if line is None or lines is None:
            return file, line, None

        absolute = line_num + line - 1
        src_line = lines[line - 1] if 0 < line <= len(lines) else None
        return file, absolute, src_line

    @staticmethod
    def diagnose(src_line, warning=False):
        """Returns the offending source line, highlighted."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        stripped = src_line.strip()

        diagnosis = "  " + colored(stripped, color, attrs=["bold"]) + "\n"
        diagnosis += "  " + colored("^" + "~" * (len(stripped) - 1), color, attrs=["bold"])
        return diagnosis

    @staticmethod
    def _header(file, line):
        if file is None:
            return ""
        if line is None:
            return colored(f"{file}: ", attrs=["bold"])
        return colored(f"{file}:{line}: ", attrs=["bold"])

    def warn(self, msg, exprs=None, line=None):
        """Generates and prints a warning message."""
        warning = MinimusFault(msg, exprs, line)
        file, absolute, src_line = self.locate(warning.line)

        print(self._header(file, absolute) + colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + warning.msg)
        if src_line:
            print(ErrorHandler.diagnose(src_line, warning=True))

    def throw(self, error):
        """Reports error, which must be a MinimusFault, and exits if fatal."""
        file, absolute, src_line = self.locate(error.line)

        error_msg = self._header(file, absolute)
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if src_line and not error.internal:
            print(ErrorHandler.diagnose(src_line))

        if self.fatal:
            sys.exit(1)
        for path in self.traceback:  # if error occurred, reset traceback (no need if error is fatal)
            self.traceback[path] = (None, None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is None:
            return False
        elif issubclass(exc_type, KeyboardInterrupt):
            self.throw(MinimusFault("keyboard interrupt"))
        elif issubclass(exc_type, SystemExit):
            do_exit = True
        elif issubclass(exc_type, RecursionError):
            self.throw(MinimusFault("maximum nesting depth exceeded"))
        elif issubclass(exc_type, MinimusFault):
            self.throw(exc_val)
        else:
            self.throw(InternalInvariantFault("unknown error: '{}: {}'", (exc_type.__name__, exc_val)))
            do_exit = True

        return not do_exit
