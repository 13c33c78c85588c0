"""Handles interactive/command-line mode for the doma interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Doma interpreter shell."""
    intro = "Welcome to Doma!\nType 'help' for more information, 'exit' or Ctrl-D to leave."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Evaluates an arbitrary line of Doma, or keeps it if it leaves a parenthesis open."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            add_to_prev = bool(self._tmp_line)
            line, continued = self.sess.preprocess_line(self._tmp_line + line, add_to_prev)

            if continued:
                self._tmp_line = line + "\n"
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if line:
                self.sess.add(line, self.line_num)
                self.sess.run()

            if self.sess.results:
                print(self.sess.pop())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Doma interpreter!\n\n"
              "Doma is a small Lisp. Everything is a parenthesized prefix form, and definitions \n"
              "persist for the rest of the session.\n\n"
              "Try it out by typing '(define square (lambda (x) (* x x)))'. This will bind a \n"
              "procedure to the name 'square'. Next, try typing '(square 5)', giving 25 as \n"
              "the result. Built-ins: + - * / < > <= >= eq if define lambda display printf \n"
              "list first rest cons length list-ref begin.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        if self._tmp_line:
            return self.default("")
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
