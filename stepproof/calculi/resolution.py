"""
Calculus: propositional resolution on a flat clause list.

One move: RESOLVE(c1, c2, spelling?). The resolvent is inserted at the
position of c2, so it shows up next to one of its parents; every clause
from that position on moves up by one id.

Atom choice is deterministic so the same pair always resolves the same way:
    no spelling  first atom of c1 whose complement occurs in c2, paired
                 with the first such complement in c2
    spelling     first atom of c1 with that name that has an opposite-
                 polarity partner in c2, paired with the first such partner

The proof is closed once the empty clause is in the list. There is no undo.
"""

import copy

from ..core.clause import Clause, parse_clause_set
from ..core.state import ResolutionState, ResolutionParams, Resolve
from ..errors import InvalidMove


def make_resolution_state(formula: str, params: ResolutionParams = None) -> ResolutionState:
    return ResolutionState(parse_clause_set(formula), params or ResolutionParams())


def apply_resolution_move(state: ResolutionState, move: Resolve,
                          verbose: bool = False) -> ResolutionState:
    """
    Resolve two clauses and insert the resolvent at c2's position.

    Raises InvalidMove; the input state is never modified.
    """
    if not isinstance(move, Resolve):
        raise InvalidMove(f"Unknown resolution move {move!r}")

    clauses = state.clause_set
    if move.c1 == move.c2:
        raise InvalidMove(f"Both ids refer to the same clause (id {move.c1})")
    for cid in (move.c1, move.c2):
        if not clauses.in_bounds(cid):
            raise InvalidMove(f"There is no clause with id {cid}")

    c1, c2 = clauses[move.c1], clauses[move.c2]
    if move.spelling is None:
        a1, a2 = auto_candidates(c1, c2, move.c1, move.c2)
    else:
        a1, a2 = spelled_candidates(c1, c2, move.c1, move.c2, move.spelling)

    resolvent = build_resolvent(c1, a1, c2, a2)

    new_state = copy.deepcopy(state)
    new_state.seal = ""
    new_state.clause_set.insert(move.c2, resolvent)
    new_state.newest_node = move.c2

    if verbose:
        print(f"  [resolve] {c1} + {c2} on '{a1.spelling}' -> {resolvent} "
              f"(id {move.c2})")
    return new_state


def auto_candidates(c1: Clause, c2: Clause, id1: int, id2: int) -> tuple:
    """Pick the atom pair to resolve on when the user did not name one."""
    names = f"Clauses '{c1}' (id {id1}) and '{c2}' (id {id2})"
    in_c2 = set(c2.spellings())
    shared = [a for a in c1 if a.spelling in in_c2]
    if not shared:
        raise InvalidMove(f"{names} contain no common variables")

    shared = [a for a in shared if c2.contains(a.not_())]
    if not shared:
        raise InvalidMove(
            f"{names} contain no common variables that appear "
            f"in positive and negated form")

    a1 = shared[0]
    a2 = next(a for a in c2 if a == a1.not_())
    return a1, a2


def spelled_candidates(c1: Clause, c2: Clause, id1: int, id2: int, spelling: str) -> tuple:
    atoms1 = c1.with_spelling(spelling)
    atoms2 = c2.with_spelling(spelling)
    if not atoms1:
        raise InvalidMove(f"Clause '{c1}' (id {id1}) does not contain atoms with spelling '{spelling}'")
    if not atoms2:
        raise InvalidMove(f"Clause '{c2}' (id {id2}) does not contain atoms with spelling '{spelling}'")

    pos, neg = Clause(tuple(atoms2)).partition()
    for a1 in atoms1:
        other = pos if a1.negated else neg
        if other:
            return a1, other[0]

    raise InvalidMove(
        f"Clauses '{c1}' (id {id1}) and '{c2}' (id {id2}) do not contain atom '{spelling}' "
        f"in both positive and negated form")


def build_resolvent(c1: Clause, a1, c2: Clause, a2) -> Clause:
    """(c1 without a1) followed by (c2 without a2), duplicates dropped."""
    return Clause.from_atoms([a for a in c1 if a != a1] + [a for a in c2 if a != a2])
