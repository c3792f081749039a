"""Natural numbers encoded as Church numerals. Note that arithmetic is not implemented here: succ, add, etc. are
ordinary definitions in the session environment, keeping everything as pure as possible.

Source: https://en.wikipedia.org/wiki/Church_encoding#Calculation_with_Church_numerals
"""

from lambdacalc.pure.term import Abstraction, Application, Variable


def church_numeral(num, f="f", x="x"):
    """Returns the Church numeral λf.λx.f (f (... (f x))) of natural number num."""
    if isinstance(num, bool) or not isinstance(num, int) or num < 0:
        raise ValueError(f"expected natural number, got '{num}'")

    body = Variable(x)
    for __ in range(num):
        body = Application(Variable(f), body)
    return Abstraction(Variable(f), Abstraction(Variable(x), body))


def church_value(cnum):
    """Returns the natural number encoded by LambdaTerm cnum. If cnum isn't a Church numeral, returns None."""
    if not isinstance(cnum, Abstraction) or not isinstance(cnum.body, Abstraction):
        return None

    f, x = cnum.param, cnum.body.param
    if f == x:
        return None

    num = 0
    nth_body = cnum.body.body
    while isinstance(nth_body, Application):
        if nth_body.fn != f:
            return None
        nth_body = nth_body.arg
        num += 1

    return num if nth_body == x else None
