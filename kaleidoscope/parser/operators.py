"""
Binary operator precedence table.

Maps a single operator character to an integer precedence; larger binds
tighter. The parser is handed a table explicitly rather than reading a
global one.
"""

from typing import Dict, Iterable, Optional, Tuple


# Reference configuration
DEFAULT_PRECEDENCES: Tuple[Tuple[str, int], ...] = (
    ("<", 10),
    ("+", 20),
    ("-", 30),
    ("*", 40),
)

# Effective precedence of anything that is not a registered operator
NO_PRECEDENCE = -1


class OperatorTable:
    """Mapping from operator character to precedence."""

    def __init__(self, precedences: Optional[Iterable[Tuple[str, int]]] = None):
        self._precedences: Dict[str, int] = {}
        for operator, precedence in precedences or ():
            self.register(operator, precedence)

    @classmethod
    def default(cls) -> "OperatorTable":
        """Table with ``<``, ``+``, ``-`` and ``*`` registered."""
        return cls(DEFAULT_PRECEDENCES)

    def register(self, operator: str, precedence: int):
        """Register (or re-register) a single-character binary operator."""
        if len(operator) != 1:
            raise ValueError(f"Operators are single characters, got {operator!r}")
        if precedence <= NO_PRECEDENCE:
            raise ValueError(f"Precedence must be greater than {NO_PRECEDENCE}, got {precedence}")
        self._precedences[operator] = precedence

    def lookup(self, operator: str) -> Optional[int]:
        return self._precedences.get(operator)

    def precedence_of(self, operator: str) -> int:
        """Precedence of ``operator``, or -1 if it is not registered."""
        return self._precedences.get(operator, NO_PRECEDENCE)

    def __contains__(self, operator: str) -> bool:
        return operator in self._precedences

    def __len__(self) -> int:
        return len(self._precedences)

    def __repr__(self) -> str:
        return f"OperatorTable({self._precedences!r})"
