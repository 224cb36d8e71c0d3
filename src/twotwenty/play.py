"""
Trick-taking: legal moves, card comparison, winner and points.
Follow suit if you can; otherwise anything goes (no obligation to trump).
"""
from __future__ import annotations

from typing import Sequence

from .deck import Card, Suit, cards_point_total


def has_suit(hand: Sequence[Card], suit: Suit) -> bool:
    return any(c.suit == suit for c in hand)


def legal_plays(hand: Sequence[Card], lead_card: Card | None) -> list[Card]:
    """
    Cards from ``hand`` that may be played. ``lead_card`` is the first card of
    the current trick, or None when this seat is leading.
    """
    if lead_card is None:
        return list(hand)
    if has_suit(hand, lead_card.suit):
        return [c for c in hand if c.suit == lead_card.suit]
    return list(hand)


def compare_cards(a: Card, b: Card, lead_suit: Suit, trump: Suit | None) -> int:
    """
    1 if ``a`` beats ``b``, -1 if ``b`` beats ``a``, 0 for the same rank.
    ``a`` is the card already on the table. Between two cards that are neither
    trump nor lead suit, ``a`` stays ahead.
    """
    if a.suit == b.suit:
        if a.strength > b.strength:
            return 1
        if a.strength < b.strength:
            return -1
        return 0
    if trump is not None:
        if a.suit == trump:
            return 1
        if b.suit == trump:
            return -1
    if a.suit == lead_suit:
        return 1
    if b.suit == lead_suit:
        return -1
    return 1


def trick_winner(
    trick: Sequence[Card],
    trump: Suit | None,
    lead_suit: Suit | None = None,
) -> int:
    """
    Seat (``played_by``) of the card that wins ``trick``.
    Cards are compared in play order against the best so far.
    """
    if lead_suit is None:
        lead_suit = trick[0].suit
    best = trick[0]
    for card in trick[1:]:
        if compare_cards(best, card, lead_suit, trump) == -1:
            best = card
    return best.played_by if best.played_by is not None else 0


def trick_points(trick: Sequence[Card]) -> int:
    """Sum of card values in a trick (0..60)."""
    return cards_point_total(trick)
