"""
Calculus: propositional clause tableaux.

A proof starts as a single root node "true". Each move grows or closes the
tree, one step at a time, and the proof is done when every branch is
closed against a complementary ancestor.

    EXPAND(leaf, clause)   hang one child per atom of the clause under leaf
    CLOSE(leaf, ancestor)  close leaf against its complement on the branch
    LEMMA(leaf, node)      hang the negation of a closed node under leaf;
                           the node's parent must lie on leaf's branch
    UNDO()                 revert the last move (needs backtracking)

Optional restrictions, fixed per proof by TableauxParams:
    regular         no literal occurs twice on one branch
    connectedness   WEAK:   every expansion below the root adds a child
                            complementary to some literal on its branch
                    STRONG: ... complementary to the expanded leaf itself

apply_tableaux_move() never touches the state it is given: it works on a
deep copy and returns that, so a rejected move leaves the caller's state
exactly as it was.
"""

import copy

from ..core.clause import parse_clause_set
from ..core.state import (
    TableauxState, TableauxParams, Node,
    Expand, Close, Lemma, Undo,
)
from ..errors import InvalidMove


def make_tableaux_state(formula: str, params: TableauxParams = None) -> TableauxState:
    """Parse a clause set and start a proof with only the root node."""
    return TableauxState(parse_clause_set(formula), params or TableauxParams())


def apply_tableaux_move(state: TableauxState, move, verbose: bool = False) -> TableauxState:
    """
    Validate and apply one move, returning the new state.

    Raises InvalidMove naming the failed precondition. The input state is
    never modified.
    """
    handler = _APPLY.get(type(move))
    if handler is None:
        raise InvalidMove(f"Unknown tableaux move {move!r}")

    new_state = copy.deepcopy(state)
    new_state.seal = ""
    handler(new_state, move)

    if verbose:
        print(f"  [{move.type.lower()}] {_describe(new_state, move)}")
    return new_state


# ── Preconditions ────────────────────────────────────────────────────────────

def _ensure_node(state: TableauxState, node_id: int):
    if not state.has_node(node_id):
        raise InvalidMove(f"Node with ID {node_id} does not exist")


def _ensure_open_leaf(state: TableauxState, leaf_id: int):
    _ensure_node(state, leaf_id)
    leaf = state.nodes[leaf_id]
    if not leaf.is_leaf:
        raise InvalidMove(f"Node '{leaf}' (ID {leaf_id}) is not a leaf")
    if leaf.is_closed:
        raise InvalidMove(f"Leaf '{leaf}' (ID {leaf_id}) is already closed")


def _branch_atoms(state: TableauxState, leaf_id: int) -> set:
    """Atoms on the branch ending in leaf_id; the synthetic root is not a literal."""
    return {state.nodes[i].atom for i in state.path_to(leaf_id)[1:]}


def _ensure_regular(state: TableauxState, leaf_id: int, atoms):
    if not state.params.regular:
        return
    on_branch = _branch_atoms(state, leaf_id)
    for atom in atoms:
        if atom in on_branch:
            raise InvalidMove(
                f"Literal '{atom}' already occurs on the branch of leaf {leaf_id}, "
                f"adding it again violates regularity")


def _verify_connectedness(state: TableauxState, leaf_id: int):
    """
    Check the children just appended under leaf_id.

    Expansions of the root are exempt in both modes.
    """
    mode = state.params.connectedness
    if mode == "NONE" or leaf_id == 0:
        return

    leaf = state.nodes[leaf_id]
    children = [state.nodes[c] for c in leaf.children]

    if mode == "STRONG":
        targets = [leaf.atom]
    else:
        targets = list(_branch_atoms(state, leaf_id))

    if not any(c.atom.is_complement_of(t) for c in children for t in targets):
        kind = "strongly" if mode == "STRONG" else "weakly"
        raise InvalidMove(
            f"Expansion on leaf '{leaf}' (ID {leaf_id}) leaves the tableaux "
            f"not {kind} connected")


# ── Moves ────────────────────────────────────────────────────────────────────

def _expand(state: TableauxState, move: Expand):
    leaf_id, clause_id = move.leaf, move.clause
    _ensure_open_leaf(state, leaf_id)
    if not state.clause_set.in_bounds(clause_id):
        raise InvalidMove(f"Clause with ID {clause_id} does not exist")

    clause = state.clause_set[clause_id]
    leaf = state.nodes[leaf_id]
    if clause.is_empty:
        raise InvalidMove(f"Clause with ID {clause_id} is empty and cannot be expanded")

    _ensure_regular(state, leaf_id, clause.atoms)

    if (state.params.connectedness == "STRONG" and leaf_id != 0
            and not any(a.is_complement_of(leaf.atom) for a in clause)):
        raise InvalidMove(
            f"Clause {clause} (ID {clause_id}) contains no complement of leaf "
            f"'{leaf}' (ID {leaf_id}), expansion would not be strongly connected")

    for atom in clause:
        state.nodes.append(Node(leaf_id, atom.spelling, atom.negated))
        leaf.children.append(len(state.nodes) - 1)

    _verify_connectedness(state, leaf_id)

    if state.params.backtracking:
        state.move_history.append(move)


def _close(state: TableauxState, move: Close):
    leaf_id, ancestor_id = move.leaf, move.ancestor
    _ensure_open_leaf(state, leaf_id)
    _ensure_node(state, ancestor_id)

    leaf = state.nodes[leaf_id]
    ancestor = state.nodes[ancestor_id]
    if not state.is_ancestor(ancestor_id, leaf_id):
        raise InvalidMove(
            f"Node '{ancestor}' (ID {ancestor_id}) is not an ancestor of "
            f"leaf '{leaf}' (ID {leaf_id})")
    if not ancestor.atom.is_complement_of(leaf.atom):
        raise InvalidMove(
            f"Leaf '{leaf}' (ID {leaf_id}) and node '{ancestor}' (ID {ancestor_id}) "
            f"are not complementary")

    leaf.close_ref = ancestor_id
    _set_closed(state, leaf_id)

    if state.params.backtracking:
        state.move_history.append(move)


def _set_closed(state: TableauxState, leaf_id: int):
    """Close the leaf, then every ancestor whose children are now all closed."""
    node = state.nodes[leaf_id]
    node.is_closed = True
    while node.parent is not None:
        parent = state.nodes[node.parent]
        if not all(state.nodes[c].is_closed for c in parent.children):
            break
        parent.is_closed = True
        node = parent


def _lemma(state: TableauxState, move: Lemma):
    leaf_id, lemma_id = move.leaf, move.lemma
    _ensure_open_leaf(state, leaf_id)
    _ensure_node(state, lemma_id)

    lemma_node = state.nodes[lemma_id]
    if not lemma_node.is_closed:
        raise InvalidMove(
            f"Node '{lemma_node}' (ID {lemma_id}) is not closed and cannot be used as a lemma")
    if lemma_node.parent is None:
        raise InvalidMove("The root node cannot be used as a lemma")

    path = state.path_to(leaf_id)
    if lemma_id in path:
        raise InvalidMove(
            f"Node '{lemma_node}' (ID {lemma_id}) lies on the branch of leaf {leaf_id}, "
            f"lemmas must come from a sibling branch")
    # the lemma only follows from the literals above its parent
    if lemma_node.parent not in path:
        raise InvalidMove(
            f"Nodes '{state.nodes[leaf_id]}' (ID {leaf_id}) and '{lemma_node}' "
            f"(ID {lemma_id}) are not siblings")

    atom = lemma_node.atom.not_()
    _ensure_regular(state, leaf_id, [atom])

    state.nodes.append(Node(leaf_id, atom.spelling, atom.negated, lemma_source=lemma_id))
    state.nodes[leaf_id].children.append(len(state.nodes) - 1)

    _verify_connectedness(state, leaf_id)

    if state.params.backtracking:
        state.move_history.append(move)


# ── Undo ─────────────────────────────────────────────────────────────────────

def _undo(state: TableauxState, move: Undo):
    if not state.params.backtracking:
        raise InvalidMove("Backtracking is not enabled for this proof")
    if not state.move_history:
        raise InvalidMove("Can't undo in initial state")

    top = state.move_history.pop()
    state.used_backtracking = True
    _REVERT[type(top)](state, top)


def _undo_close(state: TableauxState, move: Close):
    node = state.nodes[move.leaf]
    node.close_ref = None
    while node is not None and node.is_closed:
        node.is_closed = False
        node = None if node.parent is None else state.nodes[node.parent]


def _undo_expand(state: TableauxState, move):
    """Reverts EXPAND and LEMMA alike: their children are the newest nodes."""
    leaf = state.nodes[move.leaf]
    expected = list(range(len(state.nodes) - len(leaf.children), len(state.nodes)))
    if leaf.children != expected:
        raise InvalidMove(f"Move history does not match the tree at node {move.leaf}")
    del state.nodes[len(state.nodes) - len(leaf.children):]
    leaf.children.clear()


_APPLY = {Expand: _expand, Close: _close, Lemma: _lemma, Undo: _undo}
_REVERT = {Expand: _undo_expand, Close: _undo_close, Lemma: _undo_expand}


def _describe(state: TableauxState, move) -> str:
    if isinstance(move, Expand):
        return f"leaf {move.leaf} with {state.clause_set[move.clause]} (clause {move.clause})"
    if isinstance(move, Close):
        return f"leaf {move.leaf} against ancestor {move.ancestor}"
    if isinstance(move, Lemma):
        return f"leaf {move.leaf} with lemma from node {move.lemma}"
    return f"{len(state.move_history)} move(s) left in history"
