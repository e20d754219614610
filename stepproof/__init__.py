"""
Stepproof: stateless, move-by-move proof checking.

A user builds a propositional tableaux or resolution proof one move at a
time. The server keeps nothing between requests: the whole proof state
travels to the client as a sealed JSON blob and is verified when it comes
back.

Usage:
    python -m stepproof --calculus prop-tableaux --formula "a,b;!a;!b" --save proof.json
    python -m stepproof --calculus prop-tableaux --load proof.json --move EXPAND 0 0
    python -m stepproof --calculus prop-resolution --formula "a,b;!a;!b" --resolve 0 1
    python -m stepproof --calculus prop-tableaux --load proof.json --check
"""

from .core.clause import Atom, Clause, ClauseSet, parse_clause_set
from .core.state import (
    TableauxParams, ResolutionParams,
    Expand, Close, Lemma, Undo, Resolve,
    Node, TableauxState, ResolutionState,
)
from .core.seal import compute_seal, verify_seal, to_blob, from_blob
from .core.proof import is_closed, check_closed
from .calculi import CALCULI
from .calculi.tableaux import make_tableaux_state, apply_tableaux_move
from .calculi.resolution import make_resolution_state, apply_resolution_move
from .errors import ProofError, ParseError, IntegrityViolation, InvalidMove
from . import api

__all__ = [
    "Atom", "Clause", "ClauseSet", "parse_clause_set",
    "TableauxParams", "ResolutionParams",
    "Expand", "Close", "Lemma", "Undo", "Resolve",
    "Node", "TableauxState", "ResolutionState",
    "compute_seal", "verify_seal", "to_blob", "from_blob",
    "is_closed", "check_closed",
    "CALCULI",
    "make_tableaux_state", "apply_tableaux_move",
    "make_resolution_state", "apply_resolution_move",
    "ProofError", "ParseError", "IntegrityViolation", "InvalidMove",
    "api",
]
