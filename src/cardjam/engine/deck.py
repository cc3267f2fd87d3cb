from __future__ import annotations

import random

from .effects import check_winner, damage_player
from .state import CardInstance, MatchState, emit
from .types import CardCatalog


def build_deck(catalog: CardCatalog, owner: int, size: int, rng: random.Random) -> list[CardInstance]:
    """Sample `size` templates uniformly (with replacement) and shuffle them."""
    templates = catalog.templates()
    if not templates:
        raise ValueError("Catalog is empty.")
    deck = [CardInstance.from_template(rng.choice(templates), f"{owner}-{i}") for i in range(size)]
    rng.shuffle(deck)
    return deck


def _discard_for_space(state: MatchState, player: int) -> None:
    ps = state.players[player]
    if state.config.discard_policy == "random":
        index = state.rng.randrange(len(ps.hand))
    else:
        index = 0
    card = ps.hand.pop(index)
    ps.discard.append(card)
    emit(state, "CARD_DISCARDED", player=player, card_id=card.id, name=card.name)


def draw_card(state: MatchState, player: int) -> CardInstance | None:
    ps = state.players[player]
    if not ps.deck:
        penalty = state.config.deck_out_policy == "penalty_damage"
        emit(state, "DECK_EMPTY", player=player, penalty=penalty)
        if penalty:
            damage_player(state, player, state.config.deck_out_penalty, source=None, reason="deck_out")
            check_winner(state)
        return None

    if len(ps.hand) >= state.config.hand_limit:
        _discard_for_space(state, player)

    card = ps.deck.pop()
    ps.hand.append(card)
    emit(state, "CARD_DRAWN", player=player, card_id=card.id, name=card.name)
    return card
