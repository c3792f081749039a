"""Handles interactive/command-line mode for lambdacalc interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lambda calculus interpreter shell."""
    intro = "Lambda calculus interpreter :: Python backend\nType ':h' or 'help' for more information."
    prompt = "λ "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "λ "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary lambdacalc command."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(f"{self._tmp_line} {line}" if self._tmp_line else line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return False

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            output = self.sess.add(line, self.line_num)
            if output is not None:
                print(output, file=self.stdout)

        return self.sess.done

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro. 'help' followed by anything else is an ordinary line."""
        if arg:
            return self.default(f"help {arg}")
        print(self.sess.HELP, file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        if arg:
            return self.default(f"EOF {arg}")
        print(file=self.stdout)
        return True

    def do_exit(self, arg):
        """Exits interpreter. 'exit' followed by anything else is an ordinary line (for example a definition)."""
        if arg:
            return self.default(f"exit {arg}")
        return True
