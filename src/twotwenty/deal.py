"""
Distribution (deal) for 4 players.
The whole pack is dealt 8 by 8 in seat order: no stock, no talon.
"""
from __future__ import annotations

import random
from typing import NamedTuple

from .deck import Card, make_deck_32, shuffle_deck, sort_hand


class Deal(NamedTuple):
    """Result of a deal. ``hands[i]`` belongs to seat i, already in display order."""
    hands: tuple[tuple[Card, ...], ...]


def deal_hands(
    deck: list[Card] | None = None,
    rng: random.Random | None = None,
    hand_size: int = 8,
    num_seats: int = 4,
) -> Deal:
    """
    Deal ``num_seats`` hands of ``hand_size`` cards.

    With no ``deck`` a fresh one is built and shuffled. A given ``deck`` is
    dealt in the order passed unless an ``rng`` is also given, in which case it
    is shuffled first (on a copy).
    """
    if deck is None:
        deck = shuffle_deck(make_deck_32(), rng)
    elif rng is not None:
        deck = shuffle_deck(deck, rng)
    if len(deck) != hand_size * num_seats:
        raise ValueError(
            f"Cannot deal {len(deck)} cards into {num_seats} hands of {hand_size}"
        )
    hands = tuple(
        tuple(sort_hand(deck[seat * hand_size:(seat + 1) * hand_size]))
        for seat in range(num_seats)
    )
    return Deal(hands=hands)


def next_seat(seat: int, num_seats: int = 4) -> int:
    """Play goes round the table in seat order (0 -> 1 -> 2 -> 3 -> 0)."""
    return (seat + 1) % num_seats
