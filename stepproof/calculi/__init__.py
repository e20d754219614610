"""
Calculus registry.

Each calculus is a dict describing how to drive a proof:
    state_cls:       the state dataclass (has to_dict / from_dict)
    params_cls:      the frozen per-proof parameter dataclass
    make_state:      (formula, params) -> state
    apply_move:      (state, move, verbose) -> new state
    move_from_dict:  (dict) -> move
    description:     str
"""

from .tableaux import make_tableaux_state, apply_tableaux_move
from .resolution import make_resolution_state, apply_resolution_move

from ..core.state import (
    TableauxState, TableauxParams, tableaux_move_from_dict,
    ResolutionState, ResolutionParams, resolution_move_from_dict,
)


CALCULI = {
    "prop-tableaux": {
        "state_cls":      TableauxState,
        "params_cls":     TableauxParams,
        "make_state":     make_tableaux_state,
        "apply_move":     apply_tableaux_move,
        "move_from_dict": tableaux_move_from_dict,
        "description":    "Clause tableaux: expand, close, lemma and undo on a proof tree",
    },
    "prop-resolution": {
        "state_cls":      ResolutionState,
        "params_cls":     ResolutionParams,
        "make_state":     make_resolution_state,
        "apply_move":     apply_resolution_move,
        "move_from_dict": resolution_move_from_dict,
        "description":    "Resolution: derive the empty clause from a clause list",
    },
}
