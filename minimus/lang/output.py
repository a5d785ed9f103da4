"""Output sinks for the Minimus interpreter. A program's only observable side effects are one entry per print
statement and, at the end of a run, one snapshot of the variable table: both go through a sink.
"""

from abc import ABC, abstractmethod


def format_table(variables):
    """Renders a variable table as '{a=12, b=7}', sorted by name."""
    return "{" + ", ".join(f"{name}={value}" for name, value in sorted(variables.items())) + "}"


class OutputSink(ABC):
    """Append-only, line-oriented destination for a run's output."""

    @abstractmethod
    def emit(self, value):
        """Called once per evaluated print statement with the printed integer."""

    @abstractmethod
    def snapshot(self, variables):
        """Called once at the end of a run with the final variable table."""


class ConsoleSink(OutputSink):
    """Writes print output and the final table to stdout."""

    def emit(self, value):
        print(value)

    def snapshot(self, variables):
        print(format_table(variables))


class BufferSink(OutputSink):
    """Keeps everything in memory. Used for testing and embedding."""

    def __init__(self):
        self.lines = []
        self.values = []
        self.snapshots = []

    def emit(self, value):
        self.values.append(value)
        self.lines.append(str(value))

    def snapshot(self, variables):
        self.snapshots.append(dict(variables))
        self.lines.append(format_table(variables))
