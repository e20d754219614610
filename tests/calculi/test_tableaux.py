"""
Unit and property-based tests for the tableaux move engine.

Core claims:
    - a valid EXPAND adds exactly one node per atom of the clause
    - CLOSE closes the leaf and every ancestor whose children are all closed
    - closing the last open branch closes the proof
    - LEMMA only takes closed nodes from sibling branches
    - with regularity on, no accepted move repeats a literal on a branch
    - WEAK / STRONG connectedness reject unconnected expansions
    - a rejected move leaves the input state untouched
    - a closed proof is never reported for a satisfiable clause set
"""

import copy
import itertools

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from stepproof.core.clause import parse_clause_set
from stepproof.core.proof import check_closed
from stepproof.core.state import TableauxState, TableauxParams, Expand, Close, Lemma
from stepproof.calculi.tableaux import make_tableaux_state, apply_tableaux_move
from stepproof.errors import InvalidMove, ParseError


# ── Helpers ──────────────────────────────────────────────────────────────────

def play(state: TableauxState, *moves) -> TableauxState:
    for move in moves:
        state = apply_tableaux_move(state, move)
    return state


def abc_state(**params) -> TableauxState:
    """{a, b}, {!a}, {!b}"""
    return make_tableaux_state("a,b;!a;!b", TableauxParams(**params))


def branch_atoms(state: TableauxState, leaf_id: int) -> list:
    return [state.nodes[i].atom for i in state.path_to(leaf_id)[1:]]


def rejects(state: TableauxState, move, match=None):
    snapshot = copy.deepcopy(state)
    with pytest.raises(InvalidMove, match=match):
        apply_tableaux_move(state, move)
    assert state == snapshot


# ── Scenario ─────────────────────────────────────────────────────────────────

class TestClosedProof:
    def test_full_proof(self):
        state = abc_state()
        state = apply_tableaux_move(state, Expand(0, 0))
        assert [str(state.nodes[i]) for i in state.open_leaves()] == ["a", "b"]

        state = play(state, Expand(1, 1), Close(3, 1))
        assert check_closed(state) == (False, "The proof is not closed")

        state = play(state, Expand(2, 2), Close(4, 2))
        assert check_closed(state) == (True, "The proof is closed")
        assert all(n.is_closed for n in state.nodes)

    def test_make_state_parses(self):
        state = make_tableaux_state("a;b")
        assert len(state.clause_set) == 2
        with pytest.raises(ParseError):
            make_tableaux_state("a;;b")


class TestExpand:
    def test_adds_children(self):
        state = apply_tableaux_move(abc_state(), Expand(0, 0))
        assert len(state.nodes) == 3
        assert state.root.children == [1, 2]
        assert state.nodes[1].parent == 0 and state.nodes[1].spelling == "a"
        assert state.nodes[2].spelling == "b"

    def test_input_state_untouched(self):
        state = abc_state()
        apply_tableaux_move(state, Expand(0, 0))
        assert len(state.nodes) == 1

    def test_clause_out_of_bounds(self):
        rejects(abc_state(), Expand(0, 3), match="Clause with ID 3 does not exist")
        rejects(abc_state(), Expand(0, -1), match="Clause with ID -1")

    def test_missing_node(self):
        rejects(abc_state(), Expand(7, 0), match="Node with ID 7 does not exist")

    def test_not_a_leaf(self):
        state = apply_tableaux_move(abc_state(), Expand(0, 0))
        rejects(state, Expand(0, 1), match="not a leaf")

    def test_closed_leaf(self):
        state = play(abc_state(), Expand(0, 0), Expand(1, 1), Close(3, 1))
        rejects(state, Expand(3, 0), match="already closed")

    def test_no_history_without_backtracking(self):
        state = apply_tableaux_move(abc_state(), Expand(0, 0))
        assert state.move_history == []

    def test_history_with_backtracking(self):
        state = apply_tableaux_move(abc_state(backtracking=True), Expand(0, 0))
        assert state.move_history == [Expand(0, 0)]

    def test_verbose_prints(self, capsys):
        apply_tableaux_move(abc_state(), Expand(0, 0), verbose=True)
        assert "[expand]" in capsys.readouterr().out


class TestClose:
    def test_close_propagates_to_complete_ancestors(self):
        state = play(abc_state(), Expand(0, 0), Expand(1, 1), Close(3, 1))
        assert state.nodes[3].is_closed and state.nodes[3].close_ref == 1
        assert state.nodes[1].is_closed
        assert not state.root.is_closed

    def test_close_stops_at_open_sibling(self):
        state = make_tableaux_state("a,b;!a,c;!a")
        state = play(state, Expand(0, 0), Expand(1, 1), Close(3, 1))
        # 1 still has the open child c (4)
        assert state.nodes[3].is_closed
        assert not state.nodes[1].is_closed

    def test_not_complementary(self):
        state = play(abc_state(), Expand(0, 0), Expand(1, 2))
        rejects(state, Close(3, 1), match="not complementary")

    def test_not_an_ancestor(self):
        state = play(abc_state(), Expand(0, 0), Expand(1, 1))
        rejects(state, Close(3, 2), match="not an ancestor")
        rejects(state, Close(3, 3), match="not an ancestor")

    def test_ancestor_missing(self):
        state = play(abc_state(), Expand(0, 0), Expand(1, 1))
        rejects(state, Close(3, 9), match="Node with ID 9")

    def test_leaf_must_be_leaf(self):
        state = play(abc_state(), Expand(0, 0), Expand(1, 1))
        rejects(state, Close(1, 0), match="not a leaf")


class TestLemma:
    def closed_a(self, **params) -> TableauxState:
        return play(abc_state(**params), Expand(0, 0), Expand(1, 1), Close(3, 1))

    def test_lemma_appends_negation(self):
        state = apply_tableaux_move(self.closed_a(), Lemma(2, 1))
        new = state.nodes[4]
        assert (new.spelling, new.negated, new.parent) == ("a", True, 2)
        assert new.lemma_source == 1
        assert state.nodes[2].children == [4]

    def test_lemma_from_grandchild_of_other_subtree(self):
        # 3 (!a) is closed, but its parent a (1) is not on the branch of b (2)
        rejects(self.closed_a(), Lemma(2, 3), match="not siblings")

    def test_lemma_from_child_of_common_ancestor(self):
        # leaf !b (4) sits two levels below the root; a (1) hangs off the root
        state = play(self.closed_a(), Expand(2, 2))
        state = apply_tableaux_move(state, Lemma(4, 1))
        assert state.nodes[5].atom == state.nodes[1].atom.not_()
        assert state.nodes[5].lemma_source == 1

    def test_root_is_no_lemma(self):
        state = play(abc_state(), Expand(0, 0))
        state.root.is_closed = True
        rejects(state, Lemma(1, 0), match="root node")

    def test_satisfiable_set_stays_open(self):
        # a=F, b=T, c=T satisfies every clause
        state = make_tableaux_state("a,b;!a,c;!a,!c;c,!b")
        state = play(state, Expand(0, 0), Expand(1, 1), Close(3, 1), Expand(4, 2),
                     Close(5, 1), Close(6, 4))
        # c (4) is closed, but it depends on a, which is not on the b branch
        rejects(state, Lemma(2, 4), match="not siblings")
        assert not check_closed(state)[0]

    def test_lemma_node_must_be_closed(self):
        state = play(abc_state(), Expand(0, 0))
        rejects(state, Lemma(2, 1), match="not closed")

    def test_lemma_not_from_own_branch(self):
        state = play(abc_state(), Expand(0, 0), Expand(2, 2))
        # a consistent tree never has a closed ancestor above an open leaf
        state.nodes[2].is_closed = True
        rejects(state, Lemma(3, 2), match="sibling branch")

    def test_lemma_on_closed_leaf(self):
        rejects(self.closed_a(), Lemma(3, 1), match="already closed")

    def test_lemma_missing_node(self):
        rejects(self.closed_a(), Lemma(2, 42), match="Node with ID 42")

    def test_lemma_regularity(self):
        state = apply_tableaux_move(self.closed_a(regular=True), Lemma(2, 1))
        rejects(state, Lemma(4, 1), match="regularity")
        state = apply_tableaux_move(self.closed_a(), Lemma(2, 1))
        state = apply_tableaux_move(state, Lemma(4, 1))
        assert len(state.nodes) == 6

    def test_lemma_closes_branch(self):
        # a | b, with !a and a | !b: the lemma !a on the b branch closes against a
        state = make_tableaux_state("a,b;!a;a,!b")
        state = play(state, Expand(0, 0), Expand(1, 1), Close(3, 1), Expand(2, 2))
        # b branch: children a (4), !b (5); close !b against b, then use lemma on a
        state = play(state, Close(5, 2), Lemma(4, 1), Close(6, 4))
        assert check_closed(state)[0]


class TestRegularity:
    def test_repeat_on_branch_rejected(self):
        state = make_tableaux_state("a,b;a", TableauxParams(regular=True))
        state = apply_tableaux_move(state, Expand(0, 0))
        rejects(state, Expand(1, 1), match="regularity")
        state = apply_tableaux_move(state, Expand(2, 1))
        assert state.nodes[3].spelling == "a"

    def test_repeat_allowed_without_regularity(self):
        state = make_tableaux_state("a,b;a")
        state = play(state, Expand(0, 0), Expand(1, 1))
        assert len(state.nodes) == 4


class TestConnectedness:
    CLAUSES = "a;b,!a;!a,c;c,d"

    def test_root_expansion_exempt(self):
        for mode in ("WEAK", "STRONG"):
            state = make_tableaux_state(self.CLAUSES, TableauxParams(connectedness=mode))
            state = apply_tableaux_move(state, Expand(0, 3))
            assert len(state.nodes) == 3

    def test_strong_requires_complement_of_leaf(self):
        state = make_tableaux_state(self.CLAUSES, TableauxParams(connectedness="STRONG"))
        state = play(state, Expand(0, 0), Expand(1, 1))
        # leaf b (2): clause {!a, c} only connects to a higher ancestor
        rejects(state, Expand(2, 2), match="strongly connected")

    def test_weak_accepts_higher_ancestor(self):
        state = make_tableaux_state(self.CLAUSES, TableauxParams(connectedness="WEAK"))
        state = play(state, Expand(0, 0), Expand(1, 1), Expand(2, 2))
        assert len(state.nodes) == 6

    def test_weak_rejects_unconnected(self):
        state = make_tableaux_state(self.CLAUSES, TableauxParams(connectedness="WEAK"))
        state = apply_tableaux_move(state, Expand(0, 0))
        rejects(state, Expand(1, 3), match="not weakly connected")

    def test_none_accepts_anything(self):
        state = make_tableaux_state(self.CLAUSES)
        state = play(state, Expand(0, 0), Expand(1, 3))
        assert len(state.nodes) == 4

    def test_strong_lemma_must_connect(self):
        state = make_tableaux_state("a,b;!a;!b", TableauxParams(connectedness="STRONG"))
        state = play(state, Expand(0, 0), Expand(1, 1), Close(3, 1), Expand(2, 2))
        # leaf !b (4) is open; the lemma !a does not complement !b
        rejects(state, Lemma(4, 1), match="strongly connected")


class TestUnknownMove:
    def test_rejected(self):
        rejects(abc_state(), "EXPAND", match="Unknown tableaux move")


# ── Property-based tests ─────────────────────────────────────────────────────

CLAUSE_SETS = [
    "a,b;!a;!b",
    "a,b,c;!a,b;!b,!c;c",
    "p,q;!p,q;p,!q;!p,!q",
    "a,b;!a,c;!a,!c;c,!b",
]


def satisfiable(clause_set) -> bool:
    """Brute force over every assignment of the variables in clause_set."""
    names = sorted({a.spelling for c in clause_set for a in c})
    for values in itertools.product([False, True], repeat=len(names)):
        model = dict(zip(names, values))
        if all(any(model[a.spelling] != a.negated for a in c) for c in clause_set):
            return True
    return False


@st.composite
def move_lists(draw, max_moves=12):
    moves = []
    for _ in range(draw(st.integers(min_value=1, max_value=max_moves))):
        kind = draw(st.sampled_from(["EXPAND", "EXPAND", "CLOSE", "LEMMA"]))
        id1 = draw(st.integers(min_value=0, max_value=15))
        id2 = draw(st.integers(min_value=0, max_value=15 if kind != "EXPAND" else 4))
        moves.append({"EXPAND": Expand, "CLOSE": Close, "LEMMA": Lemma}[kind](id1, id2))
    return moves


def play_valid(state, moves) -> tuple:
    """Apply every move that is accepted; return the final state and accepted moves."""
    accepted = []
    for move in moves:
        try:
            state = apply_tableaux_move(state, move)
        except InvalidMove:
            continue
        accepted.append(move)
    return state, accepted


class TestTableauxProperties:

    @given(st.sampled_from(CLAUSE_SETS), move_lists())
    @settings(max_examples=60)
    def test_expand_adds_clause_size(self, clauses, moves):
        state = make_tableaux_state(clauses)
        for move in moves:
            try:
                new_state = apply_tableaux_move(state, move)
            except InvalidMove:
                continue
            if isinstance(move, Expand):
                added = len(state.clause_set[move.clause])
                assert len(new_state.nodes) == len(state.nodes) + added
            state = new_state

    @given(st.sampled_from(CLAUSE_SETS), move_lists())
    @settings(max_examples=60)
    def test_regular_branches_never_repeat(self, clauses, moves):
        state = make_tableaux_state(clauses, TableauxParams(regular=True))
        state, _ = play_valid(state, moves)
        for leaf_id in state.leaves():
            atoms = branch_atoms(state, leaf_id)
            assert len(atoms) == len(set(atoms))

    @given(st.sampled_from(CLAUSE_SETS), move_lists())
    @settings(max_examples=60)
    def test_closed_flag_matches_definition(self, clauses, moves):
        state, _ = play_valid(make_tableaux_state(clauses), moves)
        for node in state.nodes:
            if node.is_leaf:
                assert node.is_closed == (node.close_ref is not None)
            else:
                assert node.is_closed == all(state.nodes[c].is_closed for c in node.children)

    @given(st.sampled_from(CLAUSE_SETS), move_lists())
    @settings(max_examples=60)
    def test_close_refs_are_complementary_ancestors(self, clauses, moves):
        state, _ = play_valid(make_tableaux_state(clauses), moves)
        for i, node in enumerate(state.nodes):
            if node.close_ref is not None:
                assert state.is_ancestor(node.close_ref, i)
                assert state.nodes[node.close_ref].atom.is_complement_of(node.atom)

    @given(st.sampled_from(CLAUSE_SETS), move_lists())
    @settings(max_examples=60)
    def test_lemma_sources_hang_off_the_branch(self, clauses, moves):
        state, _ = play_valid(make_tableaux_state(clauses), moves)
        for i, node in enumerate(state.nodes):
            if node.lemma_source is not None:
                source = state.nodes[node.lemma_source]
                assert source.parent in state.path_to(i)
                assert node.lemma_source not in state.path_to(i)

    @given(st.sampled_from(CLAUSE_SETS), move_lists(max_moves=25))
    @settings(max_examples=150)
    def test_closed_proofs_are_refutations(self, clauses, moves):
        state, _ = play_valid(make_tableaux_state(clauses), moves)
        if check_closed(state)[0]:
            assert not satisfiable(state.clause_set)

    def test_satisfiable_helper(self):
        assert satisfiable(parse_clause_set("a,b;!a,c;!a,!c;c,!b"))
        assert not satisfiable(parse_clause_set("a,b;!a;!b"))
