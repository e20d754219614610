from .clause import Atom, Clause, ClauseSet, parse_clause_set
from .state import (
    TableauxParams, ResolutionParams,
    Expand, Close, Lemma, Undo, Resolve,
    Node, TableauxState, ResolutionState,
    tableaux_move_from_dict, resolution_move_from_dict,
)
from .seal import compute_seal, seal_state, verify_seal, to_blob, from_blob
from .proof import is_closed, check_closed, extract_branches

__all__ = [
    "Atom", "Clause", "ClauseSet", "parse_clause_set",
    "TableauxParams", "ResolutionParams",
    "Expand", "Close", "Lemma", "Undo", "Resolve",
    "Node", "TableauxState", "ResolutionState",
    "tableaux_move_from_dict", "resolution_move_from_dict",
    "compute_seal", "seal_state", "verify_seal", "to_blob", "from_blob",
    "is_closed", "check_closed", "extract_branches",
]
