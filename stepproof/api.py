"""
Request surface: everything a transport layer needs, on opaque blobs.

    blob = create("prop-tableaux", "a,b;!a;!b")
    blob = apply_move("prop-tableaux", blob, {"type": "EXPAND", "id1": 0, "id2": 0})
    closed, message = check_closed("prop-tableaux", blob)

Each call deserializes its own private copy of the state, so requests
share nothing. Errors are raised, never returned: ParseError from create,
IntegrityViolation for a bad blob, InvalidMove for a rejected move.
"""

from .calculi import CALCULI
from .core.proof import check_closed as _check_state
from .core.seal import to_blob, from_blob
from .errors import InvalidMove


def _calculus(name: str) -> dict:
    if name not in CALCULI:
        raise ValueError(f"Unknown calculus {name!r}, expected one of {', '.join(CALCULI)}")
    return CALCULI[name]


def _params(calc: dict, params):
    if params is None or isinstance(params, calc["params_cls"]):
        return params
    return calc["params_cls"].from_dict(params)


def _move(calc: dict, move):
    if not isinstance(move, dict):
        return move
    try:
        return calc["move_from_dict"](move)
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidMove(f"Could not parse move {move!r}: {e}") from e


def create(calculus: str, formula: str, params=None) -> str:
    """Parse the formula and return the sealed initial state blob."""
    calc = _calculus(calculus)
    state = calc["make_state"](formula, _params(calc, params))
    return to_blob(state)


def load(calculus: str, blob: str):
    """Verified state object from a blob."""
    return from_blob(blob, _calculus(calculus)["state_cls"])


def apply_move(calculus: str, blob: str, move, verbose: bool = False) -> str:
    """Verify, apply one move, reseal."""
    calc = _calculus(calculus)
    state = from_blob(blob, calc["state_cls"])
    state = calc["apply_move"](state, _move(calc, move), verbose=verbose)
    return to_blob(state)


def check_closed(calculus: str, blob: str) -> tuple:
    """(closed, message) for a verified blob."""
    return _check_state(load(calculus, blob))
