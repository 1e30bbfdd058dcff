from __future__ import annotations

from typing import Dict, Final


# Piece codes: one value carries both colour and type
WP, WN, WB, WR, WQ, WK, BP, BN, BB, BR, BQ, BK = range(12)

# Piece types (code % 6)
PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING = range(6)

WHITE: Final = "w"
BLACK: Final = "b"

PIECE_TO_CHAR: Dict[int, str] = {
    WP: "P",
    WN: "N",
    WB: "B",
    WR: "R",
    WQ: "Q",
    WK: "K",
    BP: "p",
    BN: "n",
    BB: "b",
    BR: "r",
    BQ: "q",
    BK: "k",
}
CHAR_TO_PIECE: Dict[str, int] = {v: k for k, v in PIECE_TO_CHAR.items()}

# Promotion letter -> piece type
PROMOTION_TYPES: Dict[str, int] = {"q": QUEEN, "r": ROOK, "b": BISHOP, "n": KNIGHT}


def piece_color(piece: int) -> str:
    return WHITE if piece < 6 else BLACK


def piece_type(piece: int) -> int:
    return piece % 6


def make_piece(color: str, ptype: int) -> int:
    return ptype if color == WHITE else ptype + 6


def opposite(color: str) -> str:
    return BLACK if color == WHITE else WHITE


def check_color(color: str) -> str:
    """Validate a side identifier and return it unchanged."""
    if color not in (WHITE, BLACK):
        raise ValueError("side must be 'w' or 'b'")
    return color
