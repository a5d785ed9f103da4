import io
import unittest
from contextlib import redirect_stdout

from minimus.lang.output import BufferSink, ConsoleSink, OutputSink, format_table


class FormatTableTestCase(unittest.TestCase):

    def test_format_table(self):
        cases = {
            "{}": {},
            "{a=84}": {"a": 84},
            "{a=512, b=10}": {"b": 10, "a": 512},
            "{a=-3, z=0}": {"z": 0, "a": -3},
        }
        for expected, case in cases.items():
            self.assertEqual(expected, format_table(case), case)


class SinkTestCase(unittest.TestCase):

    def test_abstract(self):
        self.assertRaises(TypeError, OutputSink)

    def test_buffer_sink(self):
        sink = BufferSink()
        variables = {"a": 1}
        sink.emit(5)
        sink.emit(-2)
        sink.snapshot(variables)
        variables["a"] = 2

        self.assertEqual([5, -2], sink.values)
        self.assertEqual(["5", "-2", "{a=1}"], sink.lines)
        self.assertEqual([{"a": 1}], sink.snapshots)

    def test_console_sink(self):
        out = io.StringIO()
        with redirect_stdout(out):
            sink = ConsoleSink()
            sink.emit(99)
            sink.snapshot({"b": 7, "a": 12})
        self.assertEqual("99\n{a=12, b=7}\n", out.getvalue())


if __name__ == '__main__':
    unittest.main()
