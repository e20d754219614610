"""
Tamper protection for client-held state.

The server keeps no sessions: every state goes out to the client as a JSON
blob and has to come back unchanged. The seal is an HMAC over a canonical
rendering of every field except the seal itself, so any edit made on the
client side is caught when the blob returns.

    blob = to_blob(state)                      # seals, then serializes
    state = from_blob(blob, TableauxState)     # parses, then verifies
"""

import hashlib
import hmac
import json
import os

from ..errors import IntegrityViolation


DEFAULT_SEAL_KEY = "stepproof-development-key-SETMEINENV"


def _seal_key() -> bytes:
    """Read STEPPROOF_SEAL_KEY at call time, not import time."""
    return os.environ.get("STEPPROOF_SEAL_KEY", DEFAULT_SEAL_KEY).encode()


def _flag(value) -> str:
    return "true" if value else "false"


def _ref(value) -> str:
    return "-" if value is None else str(value)


def canonical_form(state) -> str:
    """Deterministic text covering every sealed field, in fixed order."""
    calculus = getattr(state, "calculus", None)
    if calculus not in ("prop-tableaux", "prop-resolution"):
        raise TypeError(f"Cannot seal {type(state).__name__}")
    clauses = str(state.clause_set)

    if calculus == "prop-tableaux":
        p = state.params
        nodes = ",".join(
            f"({_ref(n.parent)};{n.spelling};{_flag(n.negated)};{_flag(n.is_closed)};"
            f"{_ref(n.close_ref)};{_ref(n.lemma_source)};"
            f"{'.'.join(str(c) for c in n.children)})"
            for n in state.nodes
        )
        history = ",".join(
            f"{m.type}:{m.to_dict()['id1']}:{m.to_dict()['id2']}"
            for m in state.move_history
        )
        return (f"tableauxstate|{p.connectedness}|{_flag(p.regular)}|"
                f"{_flag(p.backtracking)}|{_flag(state.used_backtracking)}|"
                f"{p.cnf_strategy}|{clauses}|[{nodes}]|[{history}]")

    p = state.params
    return (f"resolutionstate|{p.cnf_strategy}|{_flag(p.highlight_selectable)}|"
            f"{state.newest_node}|{clauses}")


def compute_seal(state) -> str:
    return hmac.new(_seal_key(), canonical_form(state).encode(),
                    hashlib.sha256).hexdigest()


def seal_state(state):
    """Recompute and store the seal. Returns the same state."""
    state.seal = compute_seal(state)
    return state


def verify_seal(state) -> bool:
    return hmac.compare_digest(state.seal.encode(), compute_seal(state).encode())


def to_blob(state) -> str:
    seal_state(state)
    return json.dumps(state.to_dict(), sort_keys=True)


def from_blob(blob: str, state_cls):
    """
    Parse a blob into a state of state_cls and check its seal.

    Anything that does not decode into a well-formed, correctly sealed
    state raises IntegrityViolation.
    """
    try:
        data = json.loads(blob)
        state = state_cls.from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise IntegrityViolation(f"Could not parse state: {e}") from e

    if not verify_seal(state):
        raise IntegrityViolation(
            "Invalid tamper protection seal, state object appears to have been modified")
    return state
