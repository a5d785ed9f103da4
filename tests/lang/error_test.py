import io
import unittest
from contextlib import redirect_stdout

from minimus.lang.error import (ErrorHandler, InternalInvariantFault, LexicalFault, MinimusFault, SemanticFault,
                                SyntaxFault)


class MinimusFaultTestCase(unittest.TestCase):

    def test_kinds(self):
        cases = {
            "LexicalFault": LexicalFault("x"),
            "SyntaxFault": SyntaxFault("x"),
            "SemanticFault": SemanticFault("x"),
            "InternalInvariantFault": InternalInvariantFault("x"),
        }
        for expected, fault in cases.items():
            self.assertEqual(expected, fault.kind)
            self.assertIsInstance(fault, MinimusFault)
        self.assertTrue(InternalInvariantFault("x").internal)
        self.assertFalse(SemanticFault("x").internal)

    def test_message(self):
        fault = SyntaxFault("'{}' expected, got {}", (")", "';'"), line=3)
        self.assertEqual("')' expected, got ';'", fault.msg)
        self.assertEqual(3, fault.line)
        self.assertEqual("')' expected, got ';' (line 3)", str(fault))

        self.assertEqual("undefined variable 'x'", str(SemanticFault("undefined variable '{}'", "x")))


class ErrorHandlerTestCase(unittest.TestCase):

    def throw(self, fault, source=None, line_num=1):
        out = io.StringIO()
        handler = ErrorHandler(fatal=False)
        handler.register_file("prog.min")
        if source is not None:
            handler.register_line("prog.min", source, line_num)

        with redirect_stdout(out):
            with handler:
                raise fault
        return out.getvalue()

    def test_suppresses_when_not_fatal(self):
        output = self.throw(SemanticFault("division by zero", line=2), "a = 1;\nb = a / 0;")
        self.assertIn("prog.min:2:", output)
        self.assertIn("error:", output)
        self.assertIn("division by zero", output)
        self.assertIn("b = a / 0;", output)

    def test_line_offset(self):
        output = self.throw(SemanticFault("undefined variable '{}'", "x", line=1), "print(x);", line_num=7)
        self.assertIn("prog.min:7:", output)
        self.assertIn("print(x);", output)

    def test_internal(self):
        output = self.throw(InternalInvariantFault("unsupported node type '{}'", "x"))
        self.assertIn("[internal]", output)

    def test_fatal_exits(self):
        handler = ErrorHandler()
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as context:
                with handler:
                    raise LexicalFault("unknown character '{}'", "@", line=1)
        self.assertEqual(1, context.exception.code)

    def test_recursion_error(self):
        output = self.throw(RecursionError())
        self.assertIn("maximum nesting depth exceeded", output)

    def test_unknown_error_propagates(self):
        with redirect_stdout(io.StringIO()) as out:
            with self.assertRaises(ZeroDivisionError):
                with ErrorHandler(fatal=False):
                    raise ZeroDivisionError("boom")
        self.assertIn("unknown error", out.getvalue())

    def test_system_exit_propagates(self):
        with self.assertRaises(SystemExit):
            with ErrorHandler(fatal=False):
                raise SystemExit(0)

    def test_no_error(self):
        with ErrorHandler() as handler:
            pass
        self.assertTrue(handler.fatal)

    def test_warn(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("<in>")
        with redirect_stdout(io.StringIO()) as out:
            handler.warn("unrecognized argument '{}'", "now")
        self.assertIn("warning:", out.getvalue())
        self.assertIn("unrecognized argument 'now'", out.getvalue())

    def test_traceback_reset_after_throw(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("prog.min")
        handler.register_line("prog.min", "a = b;")
        with redirect_stdout(io.StringIO()):
            with handler:
                raise SemanticFault("undefined variable '{}'", "b", line=1)
        self.assertEqual((None, None), handler.traceback["prog.min"])


if __name__ == '__main__':
    unittest.main()
