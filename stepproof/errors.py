"""
Error taxonomy.

All three errors are terminal for the current call. The engine validates
on a private copy of the state, so the caller's state is never partially
mutated when one of these is raised.
"""


class ProofError(Exception):
    """Base class for everything the proof engine raises on purpose."""
    pass


class ParseError(ProofError):
    """Malformed clause set input."""
    pass


class IntegrityViolation(ProofError):
    """The state blob was tampered with, corrupted, or is not a state at all."""
    pass


class InvalidMove(ProofError):
    """The move breaks a bound, a calculus rule, or a configured restriction."""
    pass
