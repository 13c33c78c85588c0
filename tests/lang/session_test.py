import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from doma.lang.error import DomaException, ErrorHandler
from doma.lang.session import Session
from doma.lang.shell import Shell
from doma.main import main
from doma.runtime.objects import Number


def write_source(source):
    """Writes source to a temporary .doma file and returns its path. The caller removes it."""
    fd, path = tempfile.mkstemp(suffix=".doma")
    with os.fdopen(fd, "w") as file:
        file.write(source)
    return path


class SessionTestCase(unittest.TestCase):

    def test_preprocess_line(self):
        should_pass = {
            "(+ 1 2)": False,
            "  (define x": True,
            "(display \"abc": True,
            "; (": False,
            ")(": False,
            "((lambda (x) x)": True,
            "": False,
        }
        for case, expected in should_pass.items():
            line, continued = Session.preprocess_line(case, False)
            self.assertEqual(case.strip(), line, case)
            self.assertEqual(expected, continued, case)

    def test_command_line(self):
        sess = Session(ErrorHandler(), Session.SH_FILE, cmd_line=True)
        self.assertFalse(sess.error_handler.fatal)

        sess.add("(define x 2)", 1)
        sess.add("(* x 21)", 2)
        sess.run()
        self.assertEqual([Number(2), Number(42)], sess.results)
        self.assertEqual("42", sess.pop())
        self.assertEqual("2", sess.pop())

    def test_nil_results_are_dropped(self):
        sess = Session(ErrorHandler(), Session.SH_FILE, cmd_line=True)
        out = io.StringIO()
        with redirect_stdout(out):
            sess.add('(display "hi")', 1)
            sess.run()

        self.assertEqual("hi\n", out.getvalue())
        self.assertEqual([], sess.results)

    def test_errors(self):
        sess = Session(ErrorHandler(), Session.SH_FILE, cmd_line=True)

        sess.add("(+ 1 @", 1)
        with self.assertRaises(DomaException) as context:
            sess.run()
        self.assertEqual("syntax error", context.exception.kind)
        self.assertEqual("line 1: illegal character '@'\nline 1: missing ')'", context.exception.msg)

        sess.add("(nope)", 2)
        with self.assertRaises(DomaException) as context:
            sess.run()
        self.assertEqual("runtime error", context.exception.kind)
        self.assertEqual("identifier not found: nope", context.exception.msg)

    def test_file(self):
        path = write_source("(define sq (lambda (x) (* x x)))\n(sq 12)\n")
        try:
            sess = Session(ErrorHandler(), path, cmd_line=False)
            sess.run()
        finally:
            os.remove(path)

        self.assertEqual([Number(144)], sess.results)

    def test_missing_file(self):
        with self.assertRaises(DomaException) as context:
            Session(ErrorHandler(), "/nonexistent/file.doma", cmd_line=False)
        self.assertIn("could not be opened", context.exception.msg)

    def test_reserved_filename(self):
        with self.assertRaises(DomaException):
            Session(ErrorHandler(), Session.SH_FILE, cmd_line=False)


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.shell = Shell(Session(ErrorHandler(), Session.SH_FILE, cmd_line=True))

    def send(self, line):
        """Feeds line to the shell. Returns (whether the shell wants to stop, printed output)."""
        out = io.StringIO()
        with redirect_stdout(out):
            stop = self.shell.onecmd(line)
        return stop, out.getvalue()

    def test_evaluate(self):
        self.assertEqual((None, "3\n"), self.send("(+ 1 2)"))
        self.assertEqual((None, "5\n"), self.send("(define x 5)"))
        self.assertEqual((None, "5\n"), self.send("x"))

    def test_line_continuation(self):
        self.assertEqual((None, ""), self.send("(define add"))
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)
        self.assertEqual((None, ""), self.send("  (lambda (a b) ; comment"))
        self.assertEqual((None, "#<procedure:add>\n"), self.send("(+ a b)))"))
        self.assertEqual(Shell._tmp_prompt, self.shell.prompt)
        self.assertEqual((None, "7\n"), self.send("(add 3 4)"))

    def test_errors_do_not_stop_the_shell(self):
        stop, output = self.send("(oops)")
        self.assertFalse(stop)
        self.assertIn("runtime error: ", output)
        self.assertIn("File '<in>', line 1:", output)

        stop, output = self.send("(+ 1 @)")
        self.assertFalse(stop)
        self.assertIn("illegal character '@'", output)

        self.assertEqual((None, "2\n"), self.send("(+ 1 1)"))

    def test_display_output(self):
        self.assertEqual((None, "hello world\n"), self.send('(display "hello" "world")'))

    def test_empty_line(self):
        self.assertEqual((False, ""), self.send(""))

    def test_exit(self):
        self.assertTrue(self.send("exit")[0])
        self.assertEqual((True, "\n"), self.send("EOF"))


class MainTestCase(unittest.TestCase):

    def run_main(self, argv):
        out = io.StringIO()
        with redirect_stdout(out):
            main(argv)
        return out.getvalue()

    def test_file(self):
        path = write_source('(define xs \'(3 1 2))\n(display "first:" (first xs))\n(length xs)\n')
        try:
            self.assertEqual("first: 3\n3\n", self.run_main([path]))
        finally:
            os.remove(path)

    def test_syntax_errors_exit(self):
        path = write_source('(display "never")\n(+ 1 2\n')
        try:
            with self.assertRaises(SystemExit) as context:
                self.run_main([path])
        finally:
            os.remove(path)
        self.assertEqual(1, context.exception.code)

    def test_runtime_errors_exit(self):
        path = write_source('(display "before")\n(first 1)\n(display "after")\n')
        out = io.StringIO()
        try:
            with redirect_stdout(out), self.assertRaises(SystemExit):
                main([path])
        finally:
            os.remove(path)

        self.assertIn("before\n", out.getvalue())
        self.assertIn("first expects a LIST, got NUMBER", out.getvalue())
        self.assertNotIn("after", out.getvalue())

    def test_recursion_limit_must_be_sensible(self):
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit):
            main(["--recursion-limit", "10", "unused.doma"])
        self.assertIn("--recursion-limit must be at least 100", out.getvalue())


if __name__ == '__main__':
    unittest.main()
