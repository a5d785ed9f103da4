"""Handles interactive/command-line mode for the Minimus interpreter. Uses cmd as backend."""

import cmd

from minimus.lang.session import Session


class Shell(cmd.Cmd):
    """Minimus interpreter shell."""
    intro = "Minimus 1.0 :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self._start_line = 0
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary Minimus statement."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if not self._tmp_line:
                self._start_line = self.line_num

            line, add_to_prev = Session.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                try:
                    self.sess.add(line, self._start_line)
                except ValueError:
                    return  # if line is empty, terminate

                self.sess.run()
                self.sess.pop()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Minimus interpreter!\n\n"
              "Minimus has one type (the integer), single-letter variables, if/else, while, \n"
              "blocks and print. Every entry is a statement, and variables are kept between \n"
              "entries. The variable table is shown after each entry.\n\n"
              "Try it out by typing 'a = 6 * 7;', then 'print(a);'. Entries with unclosed \n"
              "braces or parentheses continue on the next line.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        if self._tmp_line:
            return self.default("")
        self.line_num += 1
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        if arg:
            self.sess.error_handler.warn("unrecognized argument '{}'", arg)
            return False
        return True
