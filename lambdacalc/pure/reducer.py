"""Normal-order beta reduction and expansion of named definitions.

Reduction always contracts the leftmost outermost redex first. Unlike applicative order, this reduces a term even
when one of its arguments has no normal form: (λx.y) ((λx.x x) λx.x x) reduces to y in one step.

Not every term has a beta normal form, so evaluation stops after a fixed number of passes. A term returned after
hitting that ceiling is the best effort so far and may still be reducible: check NormalOrderReducer.normal.
"""

from lambdacalc.pure.term import Scope


def reduce_step(term, bound=None):
    """Contracts the leftmost outermost redex in term. Returns (term', contracted). term itself is left untouched."""
    if not isinstance(bound, Scope):
        bound = Scope(bound)
    return term.step(bound)


def expand(term, environment=None, bound=None):
    """Replaces every free variable of term that names a definition in environment with a copy of that definition,
    recursively. Variables bound in term are never expanded, even if a definition has the same name.
    """
    if not environment:
        return term
    if not isinstance(bound, Scope):
        bound = Scope(bound)
    return term.expand(environment, bound)


class NormalOrderReducer:
    """Implements normal-order beta reduction of a syntax tree, one contraction per step."""
    MAX_PASSES = 100

    def __init__(self, tree):
        self.tree = tree
        self.passes = 0       # number of contractions performed so far
        self.normal = False   # set once a step finds no redex

    def step(self):
        """Contracts one redex in self.tree. Returns whether or not there was one to contract."""
        self.tree, contracted = reduce_step(self.tree)
        if contracted:
            self.passes += 1
        else:
            self.normal = True
        return contracted

    def reduce(self, max_passes=None):
        """Steps until self.tree is in beta normal form or max_passes contractions have been made. Returns self.tree,
        which is only guaranteed to be in normal form if self.normal is set afterwards.
        """
        if max_passes is None:
            max_passes = NormalOrderReducer.MAX_PASSES

        for __ in range(max_passes):
            if not self.step():
                break
        else:
            # the last allowed pass may have reached a normal form
            self.normal = not reduce_step(self.tree)[1]
        return self.tree

    def __repr__(self):
        return f"NormalOrderReducer({repr(self.tree)}, passes={self.passes}, normal={self.normal})"

    def __str__(self):
        return str(self.tree)


def evaluate(term, environment=None, max_passes=None):
    """Expands term against environment, then beta-reduces it in normal order. Gives up after max_passes contractions
    (NormalOrderReducer.MAX_PASSES by default) and returns the current, possibly still reducible, term.
    """
    return NormalOrderReducer(expand(term, environment)).reduce(max_passes)
