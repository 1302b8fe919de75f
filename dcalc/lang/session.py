"""Session control for the dcalc language: the Environment that holds every binding of a session, the one-line
pipeline (parse_and_run), and the Session driver used to run files or the command-line shell.
"""

from dcalc.lang import std
from dcalc.lang.error import GenericException
from dcalc.lang.grammar import parse_line
from dcalc.lang.symbols import Fn, Nil, evaluate, render, type_check


class Environment:
    """Mutable mapping of name: (value, type). Bindings are never removed; rebinding a name overwrites it."""

    def __init__(self):
        self.bindings = {}

    def bind(self, name, value, type_):
        """Binds name to value (of type type_). Returns self, so binds can be chained."""
        self.bindings[name] = (value, type_)
        return self

    def bind_builtin(self, name, native, fn_type):
        """Binds name to a builtin function. native receives the list of evaluated arguments."""
        return self.bind(name, Fn(native, fn_type, name=name), fn_type)

    def lookup(self, name):
        """Returns (value, type) bound to name, or None if name is unbound."""
        return self.bindings.get(name)

    def __contains__(self, name):
        return name in self.bindings

    def __iter__(self):
        return iter(self.bindings)

    def __len__(self):
        return len(self.bindings)

    def __repr__(self):
        return f"Environment({', '.join(self.bindings)})"


def parse_and_run(line, env):
    """Runs line through the whole pipeline (tokenize, resolve brackets, parse, type check, evaluate) and returns the
    resulting value. Raises GenericException if any step fails.
    """
    tree = parse_line(line, env)
    type_check(tree, env)
    return evaluate(tree, env)


class Session:
    """Governs a dcalc session: one Environment shared by every line that is run in it."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"

    def __init__(self, error_handler, path=SH_FILE, cmd_line=True, import_std=True):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path            # used for error messages
        self.cmd_line = cmd_line    # whether or not in command-line mode

        self.env = Environment()
        self.results = []           # rendered results that haven't been displayed yet

        if import_std:
            std.import_std(self.env)

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            self.lines = Session.read_lines(path)
        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")
        else:
            self.lines = []

    @staticmethod
    def read_lines(path):
        """Returns (line, line_num) for every logical line of the file at path. Continuation lines are joined."""
        lines = []
        pending, pending_num = "", None

        try:
            with open(path, "r") as file:
                for line_num, line in enumerate(file, 1):
                    line, add_to_prev = Session.preprocess_line(line, pending)
                    if pending_num is None:
                        pending_num = line_num

                    if add_to_prev:
                        pending = line
                        continue
                    if line:
                        lines.append((line, pending_num))
                    pending, pending_num = "", None
        except OSError:
            raise GenericException("'{}' could not be opened", path)

        if pending:
            lines.append((pending, pending_num))  # the parser will report the unclosed bracket
        return lines

    @staticmethod
    def preprocess_line(line, prev_line=""):
        """Strips comments and surrounding whitespace from line, joining it onto prev_line (a pending continuation).
        Returns the updated line and whether it continues on the next line (because a bracket is still open).
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments

        line = line.strip()
        if prev_line:
            line = f"{prev_line} {line}".rstrip()
        open_brackets = line.count("(") + line.count("[")
        close_brackets = line.count(")") + line.count("]")
        return line, open_brackets > close_brackets

    def add(self, line, line_num=None):
        """Runs line in this session. Its result is kept in self.results unless it is Nil."""
        self.error_handler.register_line(self.path, line, line_num)  # in case error is raised

        value = parse_and_run(line, self.env)
        if not isinstance(value, Nil):
            self.results.append(render(value))

        self.error_handler.remove_line(self.path)  # error was not raised
        return value

    def run(self):
        """Runs every line read from this session's file in order, printing each result. Errors are reported by the
        error handler.
        """
        for line, line_num in self.lines:
            with self.error_handler:
                self.add(line, line_num)

            if self.results:
                print(self.pop())

    def pop(self):
        """Returns (and forgets) the rendered results collected so far, one per line."""
        results, self.results = self.results, []
        return "\n".join(results)

    def describe(self):
        """Returns 'name: type' for every binding in this session, sorted by name."""
        return "\n".join(f"{name}: {self.env.lookup(name)[1]}" for name in sorted(self.env))
