import io
import unittest
from contextlib import redirect_stdout

from doma.lang.error import DomaException, ErrorHandler


class DomaExceptionTestCase(unittest.TestCase):

    def test_message(self):
        error = DomaException("'{}' could not be opened", "missing.doma")
        self.assertIn("missing.doma", error.msg)
        self.assertEqual("error", error.kind)
        self.assertFalse(error.internal)

    def test_message_without_exprs_is_not_formatted(self):
        self.assertEqual("line 1: illegal character '{'", DomaException("line 1: illegal character '{'").msg)


class ErrorHandlerTestCase(unittest.TestCase):

    def test_non_fatal(self):
        out = io.StringIO()
        with redirect_stdout(out):
            with ErrorHandler(fatal=False):
                raise DomaException("identifier not found: x", kind="runtime error")

        self.assertIn("runtime error: ", out.getvalue())
        self.assertIn("identifier not found: x", out.getvalue())

    def test_fatal(self):
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit) as context:
            with ErrorHandler():
                raise DomaException("boom")

        self.assertEqual(1, context.exception.code)
        self.assertIn("boom", out.getvalue())

    def test_one_line_per_message(self):
        out = io.StringIO()
        with redirect_stdout(out):
            with ErrorHandler(fatal=False):
                raise DomaException("line 1: first\nline 2: second", kind="syntax error")

        lines = out.getvalue().splitlines()
        self.assertEqual(2, len(lines))
        self.assertIn("syntax error: ", lines[0])
        self.assertIn("line 1: first", lines[0])
        self.assertIn("syntax error: ", lines[1])
        self.assertIn("line 2: second", lines[1])

    def test_traceback(self):
        out = io.StringIO()
        error_handler = ErrorHandler(fatal=False)
        error_handler.register_file("<in>")
        error_handler.register_line("<in>", "(oops)", 3)
        with redirect_stdout(out):
            with error_handler:
                raise DomaException("identifier not found: oops")

        self.assertIn("File '<in>', line 3:", out.getvalue())
        self.assertIn("    (oops)", out.getvalue())
        self.assertEqual({"<in>": (None, None)}, error_handler.traceback)  # reset after a non-fatal error

    def test_internal_errors_propagate(self):
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(ValueError):
            with ErrorHandler(fatal=False):
                raise ValueError("unexpected")

        self.assertIn("[internal] ", out.getvalue())
        self.assertIn("unknown error: 'ValueError: unexpected'", out.getvalue())

    def test_recursion_and_interrupts_are_reported(self):
        should_pass = {
            RecursionError: "maximum recursion depth exceeded",
            KeyboardInterrupt: "keyboard interrupt",
        }
        for exc_type, expected in should_pass.items():
            out = io.StringIO()
            with redirect_stdout(out):
                with ErrorHandler(fatal=False):
                    raise exc_type()
            self.assertIn(expected, out.getvalue(), exc_type)

    def test_system_exit_passes_through(self):
        with self.assertRaises(SystemExit):
            with ErrorHandler(fatal=False):
                raise SystemExit(0)


if __name__ == '__main__':
    unittest.main()
