"""
Clause model: Atom, Clause, ClauseSet, plus the clause-set front end.

    Atom:      a variable name with a polarity
               Atom("a")               ->  a
               Atom("a", negated=True) -> !a

    Clause:    an ordered tuple of atoms (a disjunction).
               The empty clause () is a contradiction -> proof closed.

    ClauseSet: an ordered list of clauses, addressed by position.

Everything here is a value: no operation mutates an existing atom or clause.
"""

import re
from dataclasses import dataclass, field

from ..errors import ParseError


@dataclass(frozen=True)
class Atom:
    spelling: str
    negated: bool = False

    def not_(self) -> 'Atom':
        """The same variable with flipped polarity."""
        return Atom(self.spelling, not self.negated)

    def is_complement_of(self, other: 'Atom') -> bool:
        return self.spelling == other.spelling and self.negated != other.negated

    def __str__(self):
        return f"!{self.spelling}" if self.negated else self.spelling


@dataclass(frozen=True)
class Clause:
    """
    A disjunction of atoms.

    Order is kept because the resolution engine picks atoms by position;
    duplicates carry no meaning and are dropped by from_atoms().
    """
    atoms: tuple = ()

    @classmethod
    def from_atoms(cls, atoms) -> 'Clause':
        """Build a clause from any iterable of atoms, keeping first occurrences."""
        return cls(tuple(dict.fromkeys(atoms)))

    @property
    def is_empty(self):
        return len(self.atoms) == 0

    def contains(self, atom: Atom) -> bool:
        return atom in self.atoms

    def with_spelling(self, spelling: str) -> list:
        return [a for a in self.atoms if a.spelling == spelling]

    def spellings(self) -> list:
        """Variable names in first-seen order."""
        return list(dict.fromkeys(a.spelling for a in self.atoms))

    def partition(self) -> tuple:
        """Split into (positive atoms, negated atoms), each in clause order."""
        pos = [a for a in self.atoms if not a.negated]
        neg = [a for a in self.atoms if a.negated]
        return pos, neg

    def same_literals(self, other: 'Clause') -> bool:
        """Equality up to atom order and repetition."""
        return set(self.atoms) == set(other.atoms)

    def __len__(self):
        return len(self.atoms)

    def __iter__(self):
        return iter(self.atoms)

    def __str__(self):
        return "{" + ", ".join(str(a) for a in self.atoms) + "}"


@dataclass
class ClauseSet:
    clauses: list = field(default_factory=list)

    def __len__(self):
        return len(self.clauses)

    def __getitem__(self, idx):
        return self.clauses[idx]

    def __iter__(self):
        return iter(self.clauses)

    def in_bounds(self, idx: int) -> bool:
        return 0 <= idx < len(self.clauses)

    def insert(self, idx: int, clause: Clause):
        """Insert at idx; every clause at idx or later moves up by one."""
        self.clauses.insert(idx, clause)

    def to_list(self) -> list:
        return [[[a.spelling, a.negated] for a in c.atoms] for c in self.clauses]

    @classmethod
    def from_list(cls, data) -> 'ClauseSet':
        return cls([Clause(tuple(Atom(str(s), bool(n)) for s, n in c)) for c in data])

    def __str__(self):
        return ", ".join(str(c) for c in self.clauses)


# ── Clause-set notation ──────────────────────────────────────────────────────

_VARIABLE = re.compile(r"[A-Za-z0-9_]+")
_SKIP = re.compile(r"\s*")


def parse_clause_set(text: str) -> ClauseSet:
    """
    Parse clause-set notation: clauses split by ';', atoms by ','.

        "a,!b;!a;b"  ->  {a, !b}, {!a}, {b}

    Raises ParseError with the offending position on malformed input.
    """
    if text is None or not text.strip():
        raise ParseError("Empty clause set")

    clauses = []
    atoms = []
    pos = _SKIP.match(text, 0).end()

    while True:
        negated = False
        if pos < len(text) and text[pos] == "!":
            negated = True
            pos = _SKIP.match(text, pos + 1).end()

        m = _VARIABLE.match(text, pos)
        if m is None:
            found = repr(text[pos]) if pos < len(text) else "end of input"
            raise ParseError(f"Expected variable name at position {pos}, got {found}")
        atoms.append(Atom(m.group(0), negated))
        pos = _SKIP.match(text, m.end()).end()

        if pos >= len(text):
            clauses.append(Clause.from_atoms(atoms))
            break
        if text[pos] == ",":
            pos = _SKIP.match(text, pos + 1).end()
            continue
        if text[pos] == ";":
            clauses.append(Clause.from_atoms(atoms))
            atoms = []
            pos = _SKIP.match(text, pos + 1).end()
            if pos >= len(text):
                break
            continue
        raise ParseError(f"Unexpected character {text[pos]!r} at position {pos}")

    return ClauseSet(clauses)
