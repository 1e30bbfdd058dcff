"""Exceptions raised by the rules engine."""

from __future__ import annotations


class InvariantViolation(RuntimeError):
    """The position reached a state that legal play can never produce.

    Raised, for example, when a check test is asked about a side that has no
    king on the board.
    """


class UndoOrderError(InvariantViolation):
    """An undo record was applied out of LIFO order or more than once."""


class IllegalMoveError(ValueError):
    """A move was submitted that is not legal in the current position."""

    def __init__(self, move: object) -> None:
        super().__init__(f"illegal move: {move}")
        self.move = move
