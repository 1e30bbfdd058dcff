from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional

from .attacks import is_square_attacked
from .errors import InvariantViolation, UndoOrderError
from .move import Move, square_to_str, str_to_square
from .movegen import CASTLE_PATHS, ROOK_HOMES, generate_moves
from .pieces import (
    BLACK,
    CHAR_TO_PIECE,
    KING,
    PAWN,
    PIECE_TO_CHAR,
    PROMOTION_TYPES,
    ROOK,
    WHITE,
    check_color,
    make_piece,
    opposite,
    piece_color,
    piece_type,
)


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@dataclass(frozen=True)
class CastlingRights:
    """Four independent castling flags.

    Rights only ever get cleared during a game, so the value is immutable and
    updates produce a new instance.
    """

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    @classmethod
    def from_fen(cls, field_str: str) -> "CastlingRights":
        """Parse the FEN castling field (``"KQkq"`` subset or ``"-"``).

        Raises:
            ValueError: On letters outside ``KQkq`` or repeated letters.
        """
        if field_str == "-":
            return cls.none()
        if not field_str or any(ch not in "KQkq" for ch in field_str):
            raise ValueError("invalid castling rights")
        if len(set(field_str)) != len(field_str):
            raise ValueError("invalid castling rights")
        return cls("K" in field_str, "Q" in field_str, "k" in field_str, "q" in field_str)

    def allows(self, side: str) -> bool:
        """Return the flag for a side given as a FEN letter."""
        return {
            "K": self.white_kingside,
            "Q": self.white_queenside,
            "k": self.black_kingside,
            "q": self.black_queenside,
        }[side]

    def without(self, *sides: str) -> "CastlingRights":
        changes = {}
        for side in sides:
            changes[_RIGHTS_FIELDS[side]] = False
        return replace(self, **changes)

    def to_fen(self) -> str:
        s = "".join(side for side in "KQkq" if self.allows(side))
        return s or "-"


_RIGHTS_FIELDS = {
    "K": "white_kingside",
    "Q": "white_queenside",
    "k": "black_kingside",
    "q": "black_queenside",
}


@dataclass(frozen=True)
class UndoRecord:
    """Everything needed to reverse one move exactly.

    ``capture_sq`` equals the move's destination except for en passant, where
    the captured pawn sits one rank behind it.
    """

    move: Move
    piece: int
    captured: Optional[int]
    capture_sq: int
    castling: CastlingRights
    ep_square: Optional[int]
    halfmove_clock: int
    fullmove_number: int
    side_to_move: str


@dataclass
class Board:
    """Mutable chess position with reversible make/undo.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - ``squares`` holds a piece code or ``None`` per square.
    - Every :meth:`make_move` must be reversed by :meth:`undo_move` in strict
      LIFO order; the board tracks outstanding records to enforce it.
    """

    squares: List[Optional[int]]
    side_to_move: str  # 'w' or 'b'
    castling: CastlingRights
    ep_square: Optional[int]
    halfmove_clock: int
    fullmove_number: int
    # persistent game history (only moves made with record=True)
    history: List[UndoRecord] = field(default_factory=list, repr=False, compare=False)
    # make calls since the last reset of the counter (search diagnostic)
    nodes: int = field(default=0, repr=False, compare=False)
    _pending: List[UndoRecord] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Board: Board instance initialized with state encoded in ``fen``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid piece placement, castling rights, en passant
                square, or move counters, or places two kings of one colour.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        squares: List[Optional[int]] = [None] * 64
        for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    file_idx += n
                else:
                    if ch not in CHAR_TO_PIECE:
                        raise ValueError(f"invalid piece in FEN: {ch!r}")
                    if file_idx >= 8:
                        raise ValueError("too many squares in FEN rank")
                    squares[rank_idx * 8 + file_idx] = CHAR_TO_PIECE[ch]
                    file_idx += 1
            if file_idx != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
        for color in (WHITE, BLACK):
            if squares.count(make_piece(color, KING)) > 1:
                raise ValueError("FEN places more than one king per side")

        if stm not in (WHITE, BLACK):
            raise ValueError("side to move must be 'w' or 'b'")

        rights = CastlingRights.from_fen(castling)

        ep_square: Optional[int]
        if ep == "-":
            ep_square = None
        else:
            try:
                ep_square = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            if ep_square // 8 not in (2, 5):
                raise ValueError("invalid en passant square rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(
            squares=squares,
            side_to_move=stm,
            castling=rights,
            ep_square=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )

    def to_fen(self) -> str:
        """Serialize the current position into a normalized FEN string."""
        ranks_str: List[str] = []
        for rank_idx in range(7, -1, -1):  # 7..0 maps to ranks 8..1
            run = 0
            row = []
            for file_idx in range(8):
                piece = self.squares[rank_idx * 8 + file_idx]
                if piece is None:
                    run += 1
                else:
                    if run > 0:
                        row.append(str(run))
                        run = 0
                    row.append(PIECE_TO_CHAR[piece])
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        placement = "/".join(ranks_str)
        ep = square_to_str(self.ep_square) if self.ep_square is not None else "-"
        return (
            f"{placement} {self.side_to_move} {self.castling.to_fen()} {ep} "
            f"{self.halfmove_clock} {self.fullmove_number}"
        )

    def reset(self) -> None:
        """Reinitialize this board in place to the starting position.

        Clears the game history, any outstanding undo records and the node
        counter.
        """
        start = Board.startpos()
        self.squares = start.squares
        self.side_to_move = start.side_to_move
        self.castling = start.castling
        self.ep_square = start.ep_square
        self.halfmove_clock = start.halfmove_clock
        self.fullmove_number = start.fullmove_number
        self.history.clear()
        self._pending.clear()
        self.nodes = 0

    def copy(self) -> "Board":
        """Return an independent board with the same position and no history."""
        return Board(
            squares=list(self.squares),
            side_to_move=self.side_to_move,
            castling=self.castling,
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
        )

    def piece_at(self, sq: int) -> Optional[int]:
        return self.squares[sq]

    # --- Attacks and check ---
    def is_square_attacked(self, sq: int, by_color: str) -> bool:
        return is_square_attacked(self.squares, sq, by_color)

    def king_square(self, color: str) -> int:
        """Return the square of ``color``'s king.

        Raises:
            InvariantViolation: If that side has no king on the board.
        """
        sq = self._find_king(color)
        if sq is None:
            raise InvariantViolation(f"no king for side {color!r}")
        return sq

    def has_both_kings(self) -> bool:
        """Return True if each side has its king; status checks need both."""
        return all(self._find_king(c) is not None for c in (WHITE, BLACK))

    def _find_king(self, color: str) -> Optional[int]:
        king = make_piece(color, KING)
        for sq, piece in enumerate(self.squares):
            if piece == king:
                return sq
        return None

    def in_check(self, side: Optional[str] = None) -> bool:
        """Return True if ``side`` (default: side to move) is in check.

        Raises:
            ValueError: If ``side`` is not ``'w'`` or ``'b'``.
            InvariantViolation: If ``side`` has no king.
        """
        s = self.side_to_move if side is None else check_color(side)
        return self.is_square_attacked(self.king_square(s), opposite(s))

    # --- Move generation ---
    def generate_pseudo_legal_moves(self, color: Optional[str] = None) -> List[Move]:
        c = self.side_to_move if color is None else check_color(color)
        return generate_moves(self, c)

    def generate_legal_moves(self, color: Optional[str] = None) -> List[Move]:
        """Return legal moves for ``color`` (default: side to move).

        Pseudo-legal moves are filtered by trial make/check/undo, so the order
        of the result follows the generator's order.
        """
        return [m for m in self.generate_pseudo_legal_moves(color) if self.is_legal(m)]

    def has_legal_moves(self, color: Optional[str] = None) -> bool:
        return any(self.is_legal(m) for m in self.generate_pseudo_legal_moves(color))

    def is_legal(self, move: Move) -> bool:
        """Return True if ``move`` does not leave the mover's king attacked.

        The move is made and always undone, even when the check test raises.
        A mover without a king on the board is treated as never in check.
        """
        piece = self.squares[move.from_sq]
        if piece is None:
            return False
        mover = piece_color(piece)
        undo = self.make_move(move)
        try:
            king = self._find_king(mover)
            attacked = king is not None and self.is_square_attacked(king, opposite(mover))
        finally:
            self.undo_move(undo)
        return not attacked

    # --- Make / undo ---
    def make_move(self, move: Move, record: bool = False) -> UndoRecord:
        """Apply ``move`` in place and return the record that reverses it.

        ``move`` must come from this position's move generator: the
        en passant, double-push and castle flags drive the update and are not
        re-derived from the board.

        Args:
            move: Move to apply.
            record: Also append the record to :attr:`history` for later
                multi-move undo by the surrounding application.

        Raises:
            ValueError: If the origin square is empty.
        """
        squares = self.squares
        piece = squares[move.from_sq]
        if piece is None:
            raise ValueError("no piece to move from from_sq")
        mover = piece_color(piece)

        if move.is_en_passant:
            capture_sq = move.to_sq - 8 if mover == WHITE else move.to_sq + 8
        else:
            capture_sq = move.to_sq
        captured = squares[capture_sq]

        undo = UndoRecord(
            move=move,
            piece=piece,
            captured=captured,
            capture_sq=capture_sq,
            castling=self.castling,
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            side_to_move=self.side_to_move,
        )

        if piece_type(piece) == PAWN or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if mover == BLACK:
            self.fullmove_number += 1

        squares[move.from_sq] = None
        if move.is_en_passant:
            squares[capture_sq] = None
        if move.is_castle:
            path = CASTLE_PATHS[move.castle]
            squares[path.rook_to] = squares[path.rook_from]
            squares[path.rook_from] = None
        if move.promotion:
            squares[move.to_sq] = make_piece(mover, PROMOTION_TYPES[move.promotion])
        else:
            squares[move.to_sq] = piece

        self.castling = self._castling_after(piece, move.from_sq, captured, capture_sq)

        self.ep_square = None
        if move.is_double_push:
            self.ep_square = (move.from_sq + move.to_sq) // 2

        self.side_to_move = opposite(mover)

        self._pending.append(undo)
        if record:
            self.history.append(undo)
        self.nodes += 1
        return undo

    def undo_move(self, undo: UndoRecord) -> None:
        """Reverse the most recent :meth:`make_move` using its record.

        Raises:
            UndoOrderError: If ``undo`` is not the most recent outstanding
                record. The position is left untouched.
        """
        if not self._pending or self._pending[-1] is not undo:
            raise UndoOrderError("undo record does not match the most recent move")
        self._pending.pop()
        if self.history and self.history[-1] is undo:
            self.history.pop()

        self.castling = undo.castling
        self.ep_square = undo.ep_square
        self.halfmove_clock = undo.halfmove_clock
        self.fullmove_number = undo.fullmove_number
        self.side_to_move = undo.side_to_move

        move = undo.move
        squares = self.squares
        # Original piece goes back, so a promoted piece reverts to the pawn
        squares[move.from_sq] = undo.piece
        squares[move.to_sq] = None
        if undo.captured is not None:
            squares[undo.capture_sq] = undo.captured
        if move.is_castle:
            path = CASTLE_PATHS[move.castle]
            squares[path.rook_from] = squares[path.rook_to]
            squares[path.rook_to] = None

    def undo_last(self) -> UndoRecord:
        """Undo the most recent recorded move and return its record.

        Raises:
            ValueError: If no recorded move exists.
        """
        if not self.history:
            raise ValueError("no moves to undo")
        undo = self.history[-1]
        self.undo_move(undo)
        return undo

    def _castling_after(
        self, piece: int, from_sq: int, captured: Optional[int], capture_sq: int
    ) -> CastlingRights:
        """Clear rights lost by a king move, a rook leaving home, or a rook captured at home."""
        rights = self.castling
        color = piece_color(piece)
        if piece_type(piece) == KING:
            rights = rights.without(*(("K", "Q") if color == WHITE else ("k", "q")))
        elif piece_type(piece) == ROOK:
            side = ROOK_HOMES.get(from_sq)
            if side is not None and _side_color(side) == color:
                rights = rights.without(side)
        if captured is not None and piece_type(captured) == ROOK:
            side = ROOK_HOMES.get(capture_sq)
            if side is not None and _side_color(side) == piece_color(captured):
                rights = rights.without(side)
        return rights


def _side_color(side: str) -> str:
    return WHITE if side.isupper() else BLACK
