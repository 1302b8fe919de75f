"""Handles interactive/command-line mode for the dcalc interpreter. Uses cmd as backend."""

import cmd

from dcalc.lang.session import Session


class Shell(cmd.Cmd):
    """Dice calculator shell."""
    intro = "Dice calculator :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def onecmd(self, line):
        """Assignments and continuation lines are always dcalc, even if they start with a command name (`vars = 3`)."""
        if self._tmp_line or "=" in Session.preprocess_line(line)[0]:
            return self.default(line)
        return super().onecmd(line)

    def default(self, line):
        """Executes arbitrary dcalc line."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = Session.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if line:
                self.sess.add(line, self.line_num)

            if self.sess.results:
                print(self.sess.pop())

    def do_vars(self, arg):
        """Lists every binding in the session with its type."""
        print(self.sess.describe())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the dice calculator!\n\n"
              "Every line is an expression over numbers and dice. '2d6 + 3' is the distribution of \n"
              "rolling two six-sided dice and adding three; 'hist (2d6 + 3)' draws it, and 'table' \n"
              "lists its probabilities. Functions are curried: 'add 1' is a function that adds one.\n\n"
              "Try it out by typing 'attack = d20 + 5'. This will bind the distribution to the name \n"
              "'attack'. Next, try typing 'table (ge attack 15)' to see how likely a hit is. \n"
              "Type 'vars' to list every binding and its type.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
