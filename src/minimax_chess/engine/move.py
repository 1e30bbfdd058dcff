from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# Promotion choices in generation order
PROMOTION_PIECES = ("q", "r", "b", "n")


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    A move is a pure value: it never references board state. The flags are
    set by the move generator so the executor does not have to re-derive the
    move's shape from the position.

    Attributes:
        from_sq (int): Origin square index (0-based, a1 = 0).
        to_sq (int): Destination square index (0-based).
        promotion (Optional[str]): Lowercase promotion piece, if any.
        is_en_passant (bool): Pawn capture onto the en passant target.
        is_double_push (bool): Two-square pawn advance from the home rank.
        castle (Optional[str]): Castling side as a FEN rights letter
            (``"K"``, ``"Q"``, ``"k"`` or ``"q"``) when the move castles.
    """

    from_sq: int
    to_sq: int
    promotion: Optional[str] = None
    is_en_passant: bool = False
    is_double_push: bool = False
    castle: Optional[str] = None

    @property
    def is_castle(self) -> bool:
        return self.castle is not None

    def same_squares(self, other: "Move") -> bool:
        """Return True if ``other`` names the same origin, target and promotion.

        Used to resolve a notation-parsed move (which carries no flags) against
        the generated moves of a position.
        """
        return (
            self.from_sq == other.from_sq
            and self.to_sq == other.to_sq
            and self.promotion == other.promotion
        )

    def to_uci(self) -> str:
        """Serialize the move into coordinate notation.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + (self.promotion or "")

    def __str__(self) -> str:
        return self.to_uci()


def parse_uci(uci: str) -> Move:
    """Parse a coordinate-notation move string.

    Args:
        uci (str): Move such as ``"e2e4"`` or ``"a7a8n"``.

    Returns:
        Move: Parsed move without special-move flags.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[str] = None
    if len(uci) == 5:
        promo = uci[4].lower()
        if promo not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {promo!r}")
    return Move(from_sq, to_sq, promo)


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = int(s[1]) - 1
    return rank * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside 0..63.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    file = idx % 8
    rank = idx // 8
    return chr(ord("a") + file) + str(rank + 1)
