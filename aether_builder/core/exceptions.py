"""Exception hierarchy for the Aether Builder core.

Routine request problems (unknown ids, immovable root, missing templates)
never raise: services report them through ``OperationResult``.  The
exceptions below signal programming defects, such as a document tree that
lost one of its structural invariants.
"""

from typing import List, Optional

__all__ = ["AetherBuilderError", "TreeIntegrityError"]


class AetherBuilderError(Exception):
    """Base exception for all Aether Builder errors."""

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class TreeIntegrityError(AetherBuilderError):
    """Raised when the document tree violates uniqueness or ownership."""

    def __init__(self, problems: List[str]) -> None:
        self.problems = list(problems)
        super().__init__(
            f"Document tree integrity violated ({len(self.problems)} problem(s))",
            "; ".join(self.problems),
        )
