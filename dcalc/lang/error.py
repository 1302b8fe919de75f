"""Error handling for the dcalc language. Only GenericExceptions should be encountered while running a line: if another
type of error makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Errors chain: a lower-level GenericException can be wrapped by a higher-level one (see GenericException.concat and
enrich). The chained error keeps the most specific span available, so the offending part of the source line can still
be underlined after several layers of context have been added.
"""

import inspect
import os
import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a dcalc error. The message is a str.format template
    whose holes are filled with exprs (bolded), and span is the (start, end) offset pair of the offending part of the
    source line, or None if no location can be attributed.
    """

    def __init__(self, msg, exprs=None, span=None, internal=False, stacklevel=1):
        """Parses args for GenericException and records where in dcalc it was raised."""
        if exprs is None:
            exprs = []
        if isinstance(exprs, str) or not isinstance(exprs, (list, tuple)):
            exprs = [exprs]

        self.reason = msg.format(*(colored(str(expr), attrs=["bold"]) for expr in exprs))
        self.span = span
        self.internal = internal

        frame = inspect.currentframe()
        for _ in range(stacklevel):
            if frame.f_back is not None:
                frame = frame.f_back
        self.provenance = (os.path.basename(frame.f_code.co_filename), frame.f_lineno, frame.f_code.co_name)
        del frame

        super().__init__(self.reason)

    def concat(self, lower):
        """Concatenates lower (an error further down the chain) onto self. The result keeps self's provenance, prefers
        lower's span and appends lower's reason as an indented cause.
        """
        cause = f"\nCaused by: {lower.reason}".replace("\n", "\n    ")
        self.reason = self.reason + cause
        self.args = (self.reason,)
        if lower.span is not None:
            self.span = lower.span
        self.internal = self.internal or lower.internal
        return self

    def __str__(self):
        return self.reason


def enrich(err, msg, exprs=None, span=None):
    """Returns a new, higher-level GenericException that wraps err. Meant to be used as `raise enrich(...) from err`."""
    return GenericException(msg, exprs, span=span, stacklevel=2).concat(err)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report dcalc errors."""
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def source_line(self):
        """Returns the most recently registered source line, or None if there isn't one."""
        for line, __ in reversed(list(self.traceback.values())):
            if line:
                return line
        return None

    @staticmethod
    def diagnose(line, span):
        """Returns line with the part covered by span highlighted, and an underline below it."""
        start, end = span
        start = min(max(start, 0), len(line))
        end = min(max(end, start + 1), len(line) + 1)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def format(self, error):
        """Returns the full report for error: traceback (if any), message and diagnosis."""
        error_msg = ""
        lines = 0
        for path, (line, line_num) in self.traceback.items():
            if line:
                error_msg += f"  File '{path}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg
        elif lines == 1 and not self.fatal:
            error_msg = ""  # the offending line was just typed in, so don't repeat it

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.reason

        line = self.source_line()
        if not error.internal and error.span is not None and line:
            error_msg += "\n" + ErrorHandler.diagnose(line, error.span)

        return error_msg

    def throw(self, error):
        """Reports error using self.traceback. error must be a GenericException."""
        print(self.format(error))

        if self.fatal or error.internal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # if error occurred, reset traceback

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("expression is nested too deeply to be evaluated"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}: {}'", [exc_type.__name__, exc_val], internal=True))
            do_exit = True

        return not do_exit
