"""Session control for the Minimus language: reads a program file (or takes entries from the interactive shell),
parses it and runs it, keeping the error handler informed of which source is being processed.
"""

from minimus.lang.error import MinimusFault
from minimus.lang.interpreter import Interpreter
from minimus.lang.syntax import Parser


class Session:
    """Governs a Minimus session. In command-line mode, variables persist between entries."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, sink=None, nesting_limit=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path                    # used for error messages
        self.cmd_line = cmd_line            # whether or not in command-line mode
        self.nesting_limit = nesting_limit  # None: Parser.NESTING_LIMIT

        self.interpreter = Interpreter(sink)
        self.variables = {}  # only reused across runs in command-line mode
        self.to_exec = {}    # dict of line num: (source, tree) to execute
        self.results = []    # Executions, in run order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            self.add(Session.read(path), 1)

        elif not cmd_line:
            raise MinimusFault("'<in>' is a reserved filename")

    @staticmethod
    def read(path):
        """Returns the contents of the program file at path."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                return file.read()
        except (OSError, UnicodeDecodeError):
            raise MinimusFault("'{}' could not be opened", path)

    @staticmethod
    def preprocess_line(line, add_to_prev=""):
        """Joins line onto a pending entry (add_to_prev) and returns (entry, whether the entry continues on the next
        line). An entry continues while it opens more braces/parentheses than it closes.
        """
        if add_to_prev:
            line = add_to_prev + "\n" + line

        opened = line.count("{") + line.count("(")
        closed = line.count("}") + line.count(")")
        return line, opened > closed

    def add(self, source, line_num=1):
        """Parses source, starting on line line_num, and queues it for execution. In command-line mode, raises
        ValueError if source is blank.
        """
        if self.cmd_line and not source.strip():
            raise ValueError("nothing to execute")

        self.error_handler.register_line(self.path, source, line_num)  # in case error is raised
        tree = Parser(source, self.nesting_limit).parse()
        self.to_exec[line_num] = (source, tree)
        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Runs every queued program, in order. Will raise any faults that are encountered; output already emitted
        stays emitted.
        """
        for line_num, (source, tree) in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, source, line_num)

            try:
                variables = self.variables if self.cmd_line else None
                self.results.append(self.interpreter.run(tree, variables))
            finally:
                del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Removes and returns the most recent Execution."""
        return self.results.pop()
