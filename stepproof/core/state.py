"""
Core data structures: params, tree nodes, moves, and the two proof states.

These hold data only. Nothing in here knows the rules of either calculus;
the move engines in stepproof.calculi validate and apply moves, and
stepproof.core.seal turns a state into a tamper-evident blob.

Tableaux tree:
    The tree is an arena: state.nodes is a list, and every reference
    (parent, children, close_ref, lemma_source) is an index into it.
    Node 0 is the synthetic root "true". Nodes are only ever appended,
    and only undo removes them, always from the tail.

Moves:
    Expand(leaf, clause)   Close(leaf, ancestor)   Lemma(leaf, lemma)
    Undo()                 Resolve(c1, c2, spelling=None)
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .clause import Atom, ClauseSet
from .seal import to_blob, from_blob


CONNECTEDNESS = ("NONE", "WEAK", "STRONG")
CNF_STRATEGIES = ("naive", "optimal")


@dataclass(frozen=True)
class TableauxParams:
    """Chosen once when a tableaux proof is created; never changes afterwards."""
    connectedness: str = "NONE"
    regular: bool = False
    backtracking: bool = False
    cnf_strategy: str = "optimal"

    def __post_init__(self):
        if self.connectedness not in CONNECTEDNESS:
            raise ValueError(f"Unknown connectedness {self.connectedness!r}, "
                             f"expected one of {', '.join(CONNECTEDNESS)}")
        if self.cnf_strategy not in CNF_STRATEGIES:
            raise ValueError(f"Unknown CNF strategy {self.cnf_strategy!r}")

    def to_dict(self):
        return {"connectedness": self.connectedness, "regular": self.regular,
                "backtracking": self.backtracking, "cnf_strategy": self.cnf_strategy}

    @classmethod
    def from_dict(cls, d):
        return cls(d.get("connectedness", "NONE"), bool(d.get("regular", False)),
                   bool(d.get("backtracking", False)), d.get("cnf_strategy", "optimal"))


@dataclass(frozen=True)
class ResolutionParams:
    cnf_strategy: str = "optimal"
    highlight_selectable: bool = False

    def __post_init__(self):
        if self.cnf_strategy not in CNF_STRATEGIES:
            raise ValueError(f"Unknown CNF strategy {self.cnf_strategy!r}")

    def to_dict(self):
        return {"cnf_strategy": self.cnf_strategy,
                "highlight_selectable": self.highlight_selectable}

    @classmethod
    def from_dict(cls, d):
        return cls(d.get("cnf_strategy", "optimal"),
                   bool(d.get("highlight_selectable", False)))


# ── Moves ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Expand:
    leaf: int
    clause: int
    type: ClassVar[str] = "EXPAND"

    def to_dict(self):
        return {"type": self.type, "id1": self.leaf, "id2": self.clause}


@dataclass(frozen=True)
class Close:
    leaf: int
    ancestor: int
    type: ClassVar[str] = "CLOSE"

    def to_dict(self):
        return {"type": self.type, "id1": self.leaf, "id2": self.ancestor}


@dataclass(frozen=True)
class Lemma:
    leaf: int
    lemma: int
    type: ClassVar[str] = "LEMMA"

    def to_dict(self):
        return {"type": self.type, "id1": self.leaf, "id2": self.lemma}


@dataclass(frozen=True)
class Undo:
    type: ClassVar[str] = "UNDO"

    def to_dict(self):
        return {"type": self.type, "id1": -1, "id2": -1}


@dataclass(frozen=True)
class Resolve:
    c1: int
    c2: int
    spelling: Optional[str] = None
    type: ClassVar[str] = "RESOLVE"

    def to_dict(self):
        return {"c1": self.c1, "c2": self.c2, "spelling": self.spelling}


TABLEAUX_MOVES = {cls.type: cls for cls in (Expand, Close, Lemma, Undo)}


def tableaux_move_from_dict(d) -> object:
    """
    {"type": "EXPAND", "id1": 0, "id2": 2} -> Expand(leaf=0, clause=2)

    Type names are case-insensitive. Raises ValueError on unknown types.
    """
    kind = str(d.get("type", "")).upper()
    if kind not in TABLEAUX_MOVES:
        raise ValueError(f"Unknown move type {d.get('type')!r}")
    if kind == "UNDO":
        return Undo()
    return TABLEAUX_MOVES[kind](int(d["id1"]), int(d["id2"]))


def resolution_move_from_dict(d) -> Resolve:
    spelling = d.get("spelling")
    return Resolve(int(d["c1"]), int(d["c2"]),
                   None if spelling is None else str(spelling))


# ── Tableaux state ───────────────────────────────────────────────────────────

@dataclass
class Node:
    """
    One literal in the proof tree.

    is_closed is cached: a leaf is closed when a CLOSE move hit it, an inner
    node when all of its children are closed.
    """
    parent: Optional[int]
    spelling: str
    negated: bool = False
    is_closed: bool = False
    close_ref: Optional[int] = None
    children: list = field(default_factory=list)
    lemma_source: Optional[int] = None

    @property
    def atom(self) -> Atom:
        return Atom(self.spelling, self.negated)

    @property
    def is_leaf(self):
        return not self.children

    def __str__(self):
        return str(self.atom)

    def to_dict(self):
        return {"parent": self.parent, "spelling": self.spelling,
                "negated": self.negated, "is_closed": self.is_closed,
                "close_ref": self.close_ref, "children": list(self.children),
                "lemma_source": self.lemma_source}

    @classmethod
    def from_dict(cls, d):
        return cls(d["parent"], str(d["spelling"]), bool(d["negated"]),
                   bool(d["is_closed"]), d.get("close_ref"),
                   [int(c) for c in d["children"]], d.get("lemma_source"))


def _root() -> Node:
    return Node(parent=None, spelling="true")


@dataclass
class TableauxState:
    """
    Full state of a tableaux proof. Travels to the client and back.

    move_history is only written when params.backtracking is set.
    """
    clause_set: ClauseSet
    params: TableauxParams = field(default_factory=TableauxParams)
    nodes: list = field(default_factory=lambda: [_root()])
    move_history: list = field(default_factory=list)
    used_backtracking: bool = False
    seal: str = ""

    calculus: ClassVar[str] = "prop-tableaux"

    @property
    def root(self) -> Node:
        return self.nodes[0]

    def has_node(self, node_id: int) -> bool:
        return 0 <= node_id < len(self.nodes)

    def path_to(self, node_id: int) -> list:
        """Node ids from the root down to node_id, both included."""
        path = []
        current = node_id
        while current is not None:
            path.append(current)
            current = self.nodes[current].parent
        path.reverse()
        return path

    def is_ancestor(self, ancestor_id: int, node_id: int) -> bool:
        """Strict ancestry: a node is not its own ancestor."""
        return ancestor_id != node_id and ancestor_id in self.path_to(node_id)

    def leaves(self) -> list:
        return [i for i, n in enumerate(self.nodes) if n.is_leaf]

    def open_leaves(self) -> list:
        return [i for i in self.leaves() if not self.nodes[i].is_closed]

    def to_dict(self):
        return {
            "calculus": self.calculus,
            "clause_set": self.clause_set.to_list(),
            "params": self.params.to_dict(),
            "nodes": [n.to_dict() for n in self.nodes],
            "move_history": [m.to_dict() for m in self.move_history],
            "used_backtracking": self.used_backtracking,
            "seal": self.seal,
        }

    @classmethod
    def from_dict(cls, d):
        if d.get("calculus") != cls.calculus:
            raise ValueError(f"Not a {cls.calculus} state: {d.get('calculus')!r}")
        nodes = [Node.from_dict(n) for n in d["nodes"]]
        if not nodes:
            raise ValueError("State has no root node")
        return cls(
            clause_set=ClauseSet.from_list(d["clause_set"]),
            params=TableauxParams.from_dict(d["params"]),
            nodes=nodes,
            move_history=[tableaux_move_from_dict(m) for m in d["move_history"]],
            used_backtracking=bool(d["used_backtracking"]),
            seal=str(d["seal"]),
        )

    def save(self, path="tableaux_state.json"):
        """Seal and write the state; load() refuses the file if it was edited."""
        with open(path, "w") as f:
            f.write(to_blob(self))

    @classmethod
    def load(cls, path="tableaux_state.json"):
        with open(path) as f:
            return from_blob(f.read(), cls)


# ── Resolution state ─────────────────────────────────────────────────────────

@dataclass
class ResolutionState:
    """
    Full state of a resolution proof: just the growing clause list.

    newest_node is the index of the last inserted resolvent (-1 before the
    first move) so clients can highlight it.
    """
    clause_set: ClauseSet
    params: ResolutionParams = field(default_factory=ResolutionParams)
    newest_node: int = -1
    seal: str = ""

    calculus: ClassVar[str] = "prop-resolution"

    def to_dict(self):
        return {
            "calculus": self.calculus,
            "clause_set": self.clause_set.to_list(),
            "params": self.params.to_dict(),
            "newest_node": self.newest_node,
            "seal": self.seal,
        }

    @classmethod
    def from_dict(cls, d):
        if d.get("calculus") != cls.calculus:
            raise ValueError(f"Not a {cls.calculus} state: {d.get('calculus')!r}")
        return cls(
            clause_set=ClauseSet.from_list(d["clause_set"]),
            params=ResolutionParams.from_dict(d["params"]),
            newest_node=int(d["newest_node"]),
            seal=str(d["seal"]),
        )

    def save(self, path="resolution_state.json"):
        with open(path, "w") as f:
            f.write(to_blob(self))

    @classmethod
    def load(cls, path="resolution_state.json"):
        with open(path) as f:
            return from_blob(f.read(), cls)
