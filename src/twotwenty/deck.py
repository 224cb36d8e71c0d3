"""
220 deck: 32 cards (4 suits × 8 ranks, A K Q J 10 9 8 7).
Card values: Ace 15, King/Queen/Jack/Ten 10, the rest 0. The deck totals 220.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional


class Suit(str, Enum):
    """Suit order here is the deck order (hearts, diamonds, clubs, spades)."""
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def symbol(self) -> str:
        return {"hearts": "♥", "diamonds": "♦", "clubs": "♣", "spades": "♠"}[self.value]


class Rank(str, Enum):
    """Ranks in strength order, strongest first."""
    ACE = "A"
    KING = "K"
    QUEEN = "Q"
    JACK = "J"
    TEN = "10"
    NINE = "9"
    EIGHT = "8"
    SEVEN = "7"


RANK_ORDER: tuple[Rank, ...] = tuple(Rank)

CARD_POINTS: dict[Rank, int] = {
    Rank.ACE: 15,
    Rank.KING: 10,
    Rank.QUEEN: 10,
    Rank.JACK: 10,
    Rank.TEN: 10,
    Rank.NINE: 0,
    Rank.EIGHT: 0,
    Rank.SEVEN: 0,
}

# Hands are shown grouped hearts, clubs, diamonds, spades (alternating colours).
DISPLAY_SUIT_ORDER: tuple[Suit, ...] = (Suit.HEARTS, Suit.CLUBS, Suit.DIAMONDS, Suit.SPADES)


@dataclass(frozen=True)
class Card:
    """
    A single card. ``played_by`` is only set on cards sitting in a trick and
    does not take part in equality, so a played card still equals its hand copy.
    """

    suit: Suit
    rank: Rank
    played_by: Optional[int] = field(default=None, compare=False)

    @property
    def points(self) -> int:
        return CARD_POINTS[self.rank]

    @property
    def strength(self) -> int:
        """Higher is stronger within a suit (Ace = 7, Seven = 0)."""
        return len(RANK_ORDER) - 1 - RANK_ORDER.index(self.rank)

    def played(self, seat: int) -> "Card":
        """Copy of this card tagged with the seat that played it."""
        return replace(self, played_by=seat)

    def __str__(self) -> str:
        return f"{self.rank.value}{self.suit.symbol}"

    def __repr__(self) -> str:
        return str(self)


def make_card(suit: Suit, rank: Rank) -> Card:
    return Card(suit=suit, rank=rank)


def parse_card(text: str) -> Card:
    """
    Parse a short card name such as ``"AS"``, ``"10h"`` or ``"Q♦"``.
    Raises ValueError on anything else.
    """
    text = text.strip()
    if len(text) < 2:
        raise ValueError(f"Not a card: {text!r}")
    rank_txt, suit_txt = text[:-1].upper(), text[-1]
    suit_map = {
        "h": Suit.HEARTS, "♥": Suit.HEARTS,
        "d": Suit.DIAMONDS, "♦": Suit.DIAMONDS,
        "c": Suit.CLUBS, "♣": Suit.CLUBS,
        "s": Suit.SPADES, "♠": Suit.SPADES,
    }
    suit = suit_map.get(suit_txt.lower())
    if suit is None:
        raise ValueError(f"Unknown suit in {text!r}")
    try:
        rank = Rank(rank_txt)
    except ValueError:
        raise ValueError(f"Unknown rank in {text!r}") from None
    return Card(suit=suit, rank=rank)


def make_deck_32() -> list[Card]:
    """Build the 32-card deck, suit-major then A..7. No randomness."""
    return [make_card(s, r) for s in Suit for r in Rank]


def shuffle_deck(deck: Iterable[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a new, uniformly shuffled list. The input is left as it was."""
    if rng is None:
        rng = random.Random()
    shuffled = list(deck)
    rng.shuffle(shuffled)
    return shuffled


def cards_point_total(cards: Iterable[Card]) -> int:
    """Total points in a set of cards. 220 for the full deck."""
    return sum(c.points for c in cards)


def sort_hand(cards: Iterable[Card]) -> list[Card]:
    """Display order: grouped by DISPLAY_SUIT_ORDER, strongest first."""
    return sorted(
        cards,
        key=lambda c: (DISPLAY_SUIT_ORDER.index(c.suit), RANK_ORDER.index(c.rank)),
    )


def is_marriage(cards: list[Card]) -> bool:
    """True for exactly a King and Queen of the same suit."""
    if len(cards) != 2:
        return False
    a, b = cards
    return a.suit == b.suit and {a.rank, b.rank} == {Rank.KING, Rank.QUEEN}


def marriages_in_hand(hand: Iterable[Card]) -> list[Suit]:
    """Suits in which ``hand`` holds both King and Queen, in deck suit order."""
    held = {(c.suit, c.rank) for c in hand}
    return [s for s in Suit if (s, Rank.KING) in held and (s, Rank.QUEEN) in held]
