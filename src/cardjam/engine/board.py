from __future__ import annotations

from .state import CardInstance, MatchState, PlayerState, emit
from .types import Position, Row

COLUMNS: tuple[int, int] = (0, 1)
FRONT_POSITIONS: tuple[Position, Position] = (Position.FRONT_LEFT, Position.FRONT_RIGHT)
BACK_POSITIONS: tuple[Position, Position] = (Position.BACK_LEFT, Position.BACK_RIGHT)


def is_position(position: int) -> bool:
    return 0 <= position < len(Position)


def row_of(position: int) -> Row:
    # Same for both players; any mirroring is a presentation concern.
    return Row.FRONT if position < 2 else Row.BACK


def column_of(position: int) -> int:
    return position % 2


def front_of(column: int) -> Position:
    return FRONT_POSITIONS[column]


def back_of(column: int) -> Position:
    return BACK_POSITIONS[column]


def is_valid_attack_target(attacker_pos: int, target_pos: int) -> bool:
    return column_of(attacker_pos) == column_of(target_pos) and row_of(target_pos) == Row.FRONT


def open_positions(ps: PlayerState) -> list[int]:
    return [pos for pos, c in enumerate(ps.battlefield) if c is None]


def front_row(ps: PlayerState) -> list[tuple[int, CardInstance]]:
    return [(int(pos), c) for pos in FRONT_POSITIONS if (c := ps.battlefield[pos]) is not None]


def blocker_for(ps: PlayerState, attacker_pos: int) -> CardInstance | None:
    """The defending creature standing in the attacker's column, if any."""
    return ps.battlefield[front_of(column_of(attacker_pos))]


def promote_back_to_front(state: MatchState, player: int, announce: bool = True) -> bool:
    board = state.players[player].battlefield
    moved = False
    for column in COLUMNS:
        front, back = front_of(column), back_of(column)
        if board[front] is None and board[back] is not None:
            card = board[back]
            board[front] = card
            board[back] = None
            moved = True
            if announce:
                assert card is not None
                emit(
                    state,
                    "CREATURE_PROMOTED",
                    player=player,
                    from_pos=int(back),
                    to_pos=int(front),
                    card_id=card.id,
                    name=card.name,
                )
    return moved
