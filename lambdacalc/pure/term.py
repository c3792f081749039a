"""Pure lambda calculus syntax tree: variables, abstractions and applications.

Formally, pure lambda calculus can be defined as

```
<λ-term> ::= <name>                     ; "variable"
           | "λ" <name> "." <λ-term>    ; "abstraction"
                                        ; - introduces a binding scope over its body
           | <λ-term> <λ-term>          ; "application"
                                        ; - associating by left: a b c d = (((a b) c) d)
```

Every transformation of a syntax tree (free name analysis, alpha-renaming, capture-avoiding substitution, a single
normal-order reduction step, and expansion of named definitions) is declared as an abstract method on LambdaTerm and
implemented once per node kind, so a node kind that misses one of them cannot be instantiated.

Transformations never mutate a tree: they return either the unchanged node or a newly built one. A node is only ever
placed in two positions of a tree through an explicit copy (substitution of a variable, expansion of a name).

Sources: https://plato.stanford.edu/entries/lambda-calculus/#Com,
         http://pages.cs.wisc.edu/~horwitz/CS704-NOTES/1.LAMBDA-CALCULUS.html#NOR
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from copy import deepcopy


MARKER = "'"  # appended to a name until it is fresh: x -> x' -> x'' -> ...


def fresh_name(name, avoid):
    """Returns name with MARKER appended until it is not in avoid."""
    while name in avoid:
        name += MARKER
    return name


class Scope:
    """Bound-count map: for each name, the number of enclosing abstractions that bind it. Used so that shadowing
    (λx.λx. ...) is handled correctly during a single traversal.
    """

    def __init__(self, counts=None):
        self.counts = dict(counts) if counts else {}

    def is_bound(self, name):
        return self.counts.get(name, 0) > 0

    def names(self):
        """Names bound by at least one enclosing abstraction."""
        return {name for name, count in self.counts.items() if count > 0}

    @contextmanager
    def binding(self, name):
        """Enters an abstraction over name for the duration of the with block, then restores the prior count."""
        prior = self.counts.get(name, 0)
        self.counts[name] = prior + 1
        try:
            yield self
        finally:
            if prior == 0:
                del self.counts[name]
            else:
                self.counts[name] = prior

    def __repr__(self):
        return f"Scope({self.counts})"


class LambdaTerm(ABC):
    """Represents a λ-term: variable, abstraction, or application."""

    @abstractmethod
    def collect_free(self, scope, free):
        """Adds every name referenced but not bound within self (given the enclosing scope) to the set free."""

    @abstractmethod
    def names(self):
        """Every name occurring in self, free or bound."""

    @abstractmethod
    def rename_free(self, old, new):
        """Returns self with every variable that resolves to the free name old renamed to new."""

    @abstractmethod
    def substitute(self, var, replacement):
        """Returns self with every free occurrence of var replaced by a copy of replacement. Bound variables are
        renamed on the fly so that no free name of replacement gets captured.
        """

    @abstractmethod
    def step(self, scope):
        """Contracts the leftmost outermost redex in self, if there is one. Returns (new term, whether a redex was
        contracted); at most one redex is contracted per call.
        """

    @abstractmethod
    def expand(self, environment, scope):
        """Returns self with every free variable named in environment replaced by its (recursively expanded)
        definition.
        """

    @abstractmethod
    def alpha_equals(self, other, pairs=()):
        """Whether or not self and other are equal up to consistent renaming of bound variables. pairs holds the
        (self name, other name) bindings of enclosing abstractions, innermost last.
        """

    @abstractmethod
    def to_dict(self):
        """JSON-ready representation of the syntax tree."""

    def free_names(self, bound=None):
        """Returns the set of names referenced but not bound within self. bound is the ambient Scope (or a dict of
        bound counts); defaults to no enclosing bindings.
        """
        if not isinstance(bound, Scope):
            bound = Scope(bound)
        free = set()
        self.collect_free(bound, free)
        return free

    def copy(self):
        return deepcopy(self)

    def __str__(self):
        return self.expr

    def __repr__(self):
        return f"{type(self).__name__}('{self.expr}')"

    def __hash__(self):
        return hash((type(self).__name__, self.expr))


class Variable(LambdaTerm):
    """Variable in lambda calculus: a name. Binding is resolved by name equality."""

    def __init__(self, name):
        self.name = name

    @property
    def expr(self):
        return self.name

    def collect_free(self, scope, free):
        if not scope.is_bound(self.name):
            free.add(self.name)

    def names(self):
        return {self.name}

    def rename_free(self, old, new):
        if self.name == old:
            return Variable(new)
        return self

    def substitute(self, var, replacement):
        if self.name == var:
            return replacement.copy()
        return self

    def step(self, scope):
        """Variables are never redexes."""
        return self, False

    def expand(self, environment, scope):
        if not scope.is_bound(self.name) and self.name in environment:
            # names bound at the reference stay unexpanded inside the unfolded definition too
            return environment[self.name].copy().expand(environment, scope)
        return self

    def alpha_equals(self, other, pairs=()):
        if not isinstance(other, Variable):
            return False

        for name, other_name in reversed(pairs):
            if name == self.name or other_name == other.name:
                return name == self.name and other_name == other.name
        return self.name == other.name

    def to_dict(self):
        return {"type": "Variable", "name": self.name}

    def __eq__(self, other):
        return isinstance(other, Variable) and self.name == other.name

    __hash__ = LambdaTerm.__hash__


class Abstraction(LambdaTerm):
    """Abstraction: λparam.body. param is a Variable; a str is accepted and wrapped."""

    def __init__(self, param, body):
        self.param = param if isinstance(param, Variable) else Variable(param)
        self.body = body

    @property
    def expr(self):
        return f"λ{self.param.name}.{self.body.expr}"

    def collect_free(self, scope, free):
        with scope.binding(self.param.name):
            self.body.collect_free(scope, free)

    def names(self):
        return {self.param.name} | self.body.names()

    def rename_free(self, old, new):
        if self.param.name == old:
            return self  # old is shadowed here
        return Abstraction(self.param, self.body.rename_free(old, new))

    def alpha_rename(self, old, new):
        """Renames this abstraction's parameter old to new, along with every occurrence in the body that it binds. new
        must not occur anywhere in self, otherwise renaming could capture it.
        """
        if self.param.name != old:
            raise ValueError(f"'{self}' does not bind '{old}'")
        if new in self.names():
            raise ValueError(f"'{new}' already occurs in '{self}'")
        return Abstraction(Variable(new), self.body.rename_free(old, new))

    def substitute(self, var, replacement):
        if self.param.name == var:
            return self

        free = replacement.free_names()
        if self.param.name not in free:
            return Abstraction(self.param, self.body.substitute(var, replacement))

        fresh = fresh_name(self.param.name, free | self.names() | {var})
        return self.alpha_rename(self.param.name, fresh).substitute(var, replacement)

    def step(self, scope):
        """Abstractions are never redexes, but their bodies might contain one."""
        with scope.binding(self.param.name):
            body, contracted = self.body.step(scope)

        if contracted:
            return Abstraction(self.param, body), True
        return self, False

    def expand(self, environment, scope):
        with scope.binding(self.param.name):
            body = self.body.expand(environment, scope)
        return Abstraction(self.param, body)

    def alpha_equals(self, other, pairs=()):
        if not isinstance(other, Abstraction):
            return False
        pairs = tuple(pairs) + ((self.param.name, other.param.name),)
        return self.body.alpha_equals(other.body, pairs)

    def to_dict(self):
        return {"type": "Abstraction", "parameter": self.param.to_dict(), "body": self.body.to_dict()}

    def __eq__(self, other):
        return isinstance(other, Abstraction) and self.param == other.param and self.body == other.body

    __hash__ = LambdaTerm.__hash__


class Application(LambdaTerm):
    """Application of fn to arg."""

    def __init__(self, fn, arg):
        self.fn = fn
        self.arg = arg

    @property
    def expr(self):
        fn, arg = self.fn.expr, self.arg.expr
        if isinstance(self.fn, Abstraction):
            fn = f"({fn})"
        if isinstance(self.arg, (Abstraction, Application)):
            arg = f"({arg})"
        return f"{fn} {arg}"

    @property
    def is_redex(self):
        """An Application is a redex if its function position is an Abstraction."""
        return isinstance(self.fn, Abstraction)

    def collect_free(self, scope, free):
        self.fn.collect_free(scope, free)
        self.arg.collect_free(scope, free)

    def names(self):
        return self.fn.names() | self.arg.names()

    def rename_free(self, old, new):
        return Application(self.fn.rename_free(old, new), self.arg.rename_free(old, new))

    def substitute(self, var, replacement):
        return Application(self.fn.substitute(var, replacement), self.arg.substitute(var, replacement))

    def contract(self, scope):
        """Beta-reduces this redex: (λx.M) N -> M[x := N]. If x is free in N, the abstraction is first renamed to a
        name that is fresh for N, for itself, and for the enclosing scope.
        """
        abstraction, arg = self.fn, self.arg

        free = arg.free_names()
        if abstraction.param.name in free:
            avoid = free | abstraction.names() | scope.names()
            abstraction = abstraction.alpha_rename(abstraction.param.name, fresh_name(abstraction.param.name, avoid))

        return abstraction.body.substitute(abstraction.param.name, arg)

    def step(self, scope):
        if self.is_redex:
            return self.contract(scope), True

        fn, contracted = self.fn.step(scope)
        if contracted:
            return Application(fn, self.arg), True

        arg, contracted = self.arg.step(scope)
        if contracted:
            return Application(self.fn, arg), True
        return self, False

    def expand(self, environment, scope):
        return Application(self.fn.expand(environment, scope), self.arg.expand(environment, scope))

    def alpha_equals(self, other, pairs=()):
        if not isinstance(other, Application):
            return False
        return self.fn.alpha_equals(other.fn, pairs) and self.arg.alpha_equals(other.arg, pairs)

    def to_dict(self):
        return {"type": "Application", "fn": self.fn.to_dict(), "argument": self.arg.to_dict()}

    def __eq__(self, other):
        return isinstance(other, Application) and self.fn == other.fn and self.arg == other.arg

    __hash__ = LambdaTerm.__hash__


def free_names(term, bound=None):
    """Names referenced but not bound within term, given the ambient bound counts."""
    return term.free_names(bound)


def alpha_rename(term, old, new):
    """Renames the parameter old of abstraction term to new. Raises ValueError if term is not an abstraction over old
    or if new already occurs in term.
    """
    if not isinstance(term, Abstraction):
        raise ValueError(f"'{term}' is not an abstraction")
    return term.alpha_rename(old, new)


def substitute(term, var, replacement):
    """Capture-avoiding substitution term[var := replacement]."""
    return term.substitute(var, replacement)
