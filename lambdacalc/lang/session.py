"""Session control for lambdacalc. A Session owns the environment of named definitions and runs commands against the
pure lambda calculus core, either line by line from the shell or from a .lc file.

Commands (everything else is a λ-term to evaluate, or a `name = λ-term` definition):

```
:let <name> = <λ-term>     ; same as a bare definition
:e, :eval <λ-term>         ; expand, then beta-reduce to normal form
:b, :beta <λ-term>         ; expand, then contract a single redex
:x, :expand <λ-term>       ; expand named definitions only
:p, :parse <λ-term>        ; show the syntax tree
:n, :num <λ-term>          ; evaluate, showing Church numerals as numbers
:clr, :clear               ; forget every definition
:h, :help                  ; short intro
:q, :quit                  ; leave the session
```

Comments start with ";;" and run to the end of the line.
"""

import json

from lambdacalc.lang.error import SemanticError
from lambdacalc.lang.numerical import church_value
from lambdacalc.pure.grammar import NAME, parse, tokenize
from lambdacalc.pure.reducer import NormalOrderReducer, expand, reduce_step


class Session:
    """Governs a lambdacalc session, with control over the environment of named definitions."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"
    HELP = ("Welcome to the lambdacalc interpreter!\n\n"
            "This interpreter supports pure lambda calculus as imagined by Church, reduced in \n"
            "normal order, as well as named definitions.\n\n"
            "Try it out by typing 'I = λx.x'. This will bind the λ-term 'λx.x' to the name \n"
            "'I'. Next, try typing 'I y'. This will apply 'I' to 'y', giving 'y' as the \n"
            "result. Multiple parameters can be written at once: 'K = \\x y -> x'.\n\n"
            "Commands: :let, :e(val), :b(eta), :x (expand), :p(arse), :n(um), :clr (clear), \n"
            ":h(elp), :q(uit).")

    def __init__(self, error_handler, path=SH_FILE, cmd_line=True, max_passes=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path              # used for error messages
        self.cmd_line = cmd_line      # whether or not in command-line mode
        self.max_passes = max_passes  # None means NormalOrderReducer.MAX_PASSES

        self.environment = {}  # dict of name: LambdaTerm defined in the current session
        self.lines = []        # list of (line, line_num) to run, in file mode
        self.results = []      # outputs of run, in file mode
        self.done = False      # set by :quit

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            self.lines = Session.read(path)
        elif not cmd_line:
            raise SemanticError("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line):
        """Strips comments and trailing whitespace from line. Returns the line and whether or not it continues on the
        next line (it does if it leaves parentheses open).
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments

        line = line.rstrip()
        return line, line.count("(") > line.count(")")

    @staticmethod
    def is_binding(line):
        """Whether or not line has an '=' outside of parentheses."""
        depth = 0
        for char in line:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
            elif char == "=" and depth == 0:
                return True
        return False

    @staticmethod
    def read(path):
        """Returns the (line, line_num) pairs of the .lc file at path, joining continued lines."""
        lines = []
        pending = None  # (line so far, line_num it started on)

        try:
            with open(path, "r", encoding="utf-8") as file:
                for line_num, line in enumerate(file, start=1):
                    if pending is not None:
                        line, line_num = f"{pending[0]} {line.strip()}", pending[1]

                    line, add_to_prev = Session.preprocess_line(line)
                    if add_to_prev:
                        pending = (line, line_num)
                    else:
                        pending = None
                        if line.strip():
                            lines.append((line.strip(), line_num))
        except OSError:
            raise SemanticError("'{}' could not be opened", path, diagnosis=False)

        if pending is not None:
            lines.append((pending[0].strip(), pending[1]))  # let the parser report the open parentheses
        return lines

    def run(self):
        """Executes every line read from self.path, collecting outputs in self.results. Stops at :quit."""
        for line, line_num in self.lines:
            output = self.add(line, line_num)
            if output is not None:
                self.results.append(output)
            if self.done:
                break
        return self.results

    def add(self, line, line_num):
        """Executes line, registering it with the error handler so that errors point at it."""
        self.error_handler.register_line(self.path, line, line_num)  # in case error is raised
        output = self.execute(line)
        self.error_handler.remove_line(self.path)  # error was not raised
        return output

    def execute(self, line):
        """Routes line to the matching command. Returns the text to show for it, or None."""
        line, __ = Session.preprocess_line(line)
        line = line.strip()
        if not line:
            return None

        if not line.startswith(":"):
            if Session.is_binding(line):
                return self._show_binding(line)
            return str(self.evaluate(line))

        command, __, arg = line[1:].strip().partition(" ")
        arg = arg.strip()

        if command in ("q", "quit"):
            self.done = True
            return None
        elif command in ("h", "help"):
            return Session.HELP
        elif command in ("clr", "clear"):
            self.clear()
            return None
        elif command == "let":
            return self._show_binding(arg)
        elif command in ("e", "eval"):
            return str(self.evaluate(arg))
        elif command in ("b", "beta"):
            return str(self.step(arg))
        elif command in ("x", "expand"):
            return str(self.expand(arg))
        elif command in ("p", "parse"):
            return json.dumps(self.parse(arg).to_dict(), indent=2, ensure_ascii=False)
        elif command in ("n", "num"):
            return self.number(arg)

        raise SemanticError("unknown command '{}'", line, end=len(command) + 1)

    def clear(self):
        """Forgets every definition."""
        self.environment.clear()

    def parse(self, expr):
        """Parses expr without touching the environment."""
        return parse(expr)

    def bind(self, stmt):
        """Binds `name = λ-term` in the environment and returns the bound term. The definition is only stored if it
        parses and does not refer to itself, directly or through other definitions.
        """
        if "=" not in stmt:
            raise SemanticError("'{}' has no '='", stmt, diagnosis=False)

        name, __, expr = stmt.partition("=")
        name, expr = name.strip(), expr.strip()

        if not name:
            raise SemanticError("binding name in '{}' cannot be empty", stmt, end=stmt.index("="))

        tokens = tokenize(name)
        if len(tokens) != 1 or tokens[0].kind != NAME:
            msg = "l-value of '{}' is not a valid variable"
            raise SemanticError(msg, stmt, end=stmt.index("="))

        term = parse(expr)

        if Session._refers_to(name, term, {**self.environment, name: term}):
            msg = "recursive definitions not supported: '{}' refers to itself"
            raise SemanticError(msg, (stmt, name), end=stmt.index("="))

        self.environment[name] = term
        return term

    def expand(self, expr):
        """Parses expr and resolves its named definitions."""
        return expand(parse(expr), self.environment)

    def step(self, expr):
        """Parses and expands expr, then contracts its leftmost outermost redex (if any)."""
        term, __ = reduce_step(self.expand(expr))
        return term

    def evaluate(self, expr):
        """Parses and expands expr, then beta-reduces it. Warns if the pass ceiling was hit before a normal form."""
        reducer = NormalOrderReducer(self.expand(expr))
        term = reducer.reduce(self.max_passes)

        if not reducer.normal:
            msg = "'{}' might not have a beta normal form: stopped after {} passes"
            self.error_handler.warn(msg, (expr, reducer.passes), diagnosis=False)
        return term

    def number(self, expr):
        """Evaluates expr; shows the result as a number if it is a Church numeral."""
        term = self.evaluate(expr)
        value = church_value(term)
        return str(term) if value is None else str(value)

    def _show_binding(self, stmt):
        """Binds stmt. Definitions are only echoed back in command-line mode."""
        term = self.bind(stmt)
        if self.cmd_line:
            return f"{stmt.partition('=')[0].strip()} = {term}"
        return None

    @staticmethod
    def _refers_to(name, term, environment, seen=None):
        """Whether or not term refers to name, directly or through the definitions in environment."""
        if seen is None:
            seen = set()

        for free in term.free_names():
            if free == name:
                return True
            if free in environment and free not in seen:
                seen.add(free)
                if Session._refers_to(name, environment[free], environment, seen):
                    return True
        return False

    def __repr__(self):
        return f"Session(path='{self.path}', environment={list(self.environment)})"

