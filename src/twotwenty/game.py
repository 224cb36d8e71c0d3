"""
Single round orchestration: deal → bid → trump → play 8 tricks → finished.

Every action takes a ``RoundState`` snapshot and returns a new one. An action
that is not allowed (wrong phase, not a legal card, under-bid) returns the
snapshot it was given, unchanged and identical.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Sequence

from .bidding import (
    PASS,
    BidRecord,
    BidState,
    apply_bid,
    bidding_result,
    new_bidding,
)
from .config import DEFAULT_CONFIG, RulesConfig
from .deal import deal_hands, next_seat
from .deck import Card, Suit
from .play import legal_plays, trick_points, trick_winner

logger = logging.getLogger(__name__)

TRICKS_PER_ROUND = 8
DEFAULT_SEAT_NAMES = ("You", "Bot 1", "Bot 2", "Bot 3")
DEFAULT_AUTOMATED = (False, True, True, True)


class Phase(str, Enum):
    DEALING = "dealing"
    BIDDING = "bidding"
    SELECTING_TRUMP = "selecting_trump"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass(frozen=True)
class Seat:
    """A player at the table. ``hand`` order is for display only."""

    id: str
    name: str
    hand: tuple[Card, ...] = ()
    is_bot: bool = False


@dataclass(frozen=True)
class RoundState:
    """Immutable snapshot of one round."""

    seats: tuple[Seat, ...]
    current_seat: int
    phase: Phase
    bidding: BidState
    trump: Suit | None = None
    tricks: tuple[tuple[Card, ...], ...] = ()
    current_trick: tuple[Card, ...] = ()
    scores: tuple[int, ...] = (0, 0, 0, 0)

    # Views over the bidding snapshot
    @property
    def current_bid(self) -> int:
        return self.bidding.current_bid

    @property
    def bid_winner(self) -> int | None:
        return self.bidding.bid_winner

    @property
    def pass_count(self) -> int:
        return self.bidding.pass_count

    @property
    def bids(self) -> tuple[BidRecord, ...]:
        return self.bidding.bids

    @property
    def active_seats(self) -> tuple[int, ...]:
        return self.bidding.active

    @property
    def lead_card(self) -> Card | None:
        return self.current_trick[0] if self.current_trick else None

    def hand(self, seat: int) -> tuple[Card, ...]:
        return self.seats[seat].hand

    def scores_by_id(self) -> Dict[str, int]:
        return {s.id: score for s, score in zip(self.seats, self.scores)}


def _make_seats(
    seat_names: Sequence[str] | None,
    automated: Sequence[bool] | None,
) -> tuple[Seat, ...]:
    names = tuple(seat_names) if seat_names is not None else DEFAULT_SEAT_NAMES
    flags = tuple(automated) if automated is not None else DEFAULT_AUTOMATED
    if len(names) != 4 or len(flags) != 4:
        raise ValueError(
            f"220 needs exactly 4 seats, got {len(names)} names and {len(flags)} automation flags"
        )
    return tuple(
        Seat(id=f"p{i + 1}", name=name, is_bot=bool(bot))
        for i, (name, bot) in enumerate(zip(names, flags))
    )


def empty_round(
    seat_names: Sequence[str] | None = None,
    automated: Sequence[bool] | None = None,
    config: RulesConfig = DEFAULT_CONFIG,
) -> RoundState:
    """A round in the dealing phase: seats set, no cards yet."""
    return RoundState(
        seats=_make_seats(seat_names, automated),
        current_seat=0,
        phase=Phase.DEALING,
        bidding=new_bidding(config),
        scores=(0,) * config.num_seats,
    )


def deal_round(
    state: RoundState,
    config: RulesConfig = DEFAULT_CONFIG,
    rng: random.Random | None = None,
    deck: list[Card] | None = None,
) -> RoundState:
    """Deal a fresh pack and open the bidding with seat 0 to speak."""
    if state.phase != Phase.DEALING:
        logger.debug("Rejected deal in phase %s", state.phase.value)
        return state
    if deck is None:
        deal = deal_hands(rng=rng or random.Random(), hand_size=config.hand_size, num_seats=config.num_seats)
    else:
        deal = deal_hands(deck=deck, hand_size=config.hand_size, num_seats=config.num_seats)
    seats = tuple(replace(seat, hand=hand) for seat, hand in zip(state.seats, deal.hands))
    return replace(
        state,
        seats=seats,
        phase=Phase.BIDDING,
        current_seat=0,
        bidding=new_bidding(config, first_seat=0),
    )


def new_round(
    seat_names: Sequence[str] | None = None,
    automated: Sequence[bool] | None = None,
    config: RulesConfig = DEFAULT_CONFIG,
    rng: random.Random | None = None,
    deck: list[Card] | None = None,
) -> RoundState:
    """
    Factory for a ready-to-bid round. Each call builds an independent value.

    ``deck`` deals a fixed card order (seat 0 gets the first 8 cards, ...),
    otherwise a fresh pack is shuffled with ``rng``.
    """
    return deal_round(empty_round(seat_names, automated, config), config, rng=rng, deck=deck)


def strongest_suit(hand: Sequence[Card]) -> Suit | None:
    """
    Suit with the most card points in ``hand``. Ties go to the suit met first
    in hand order. None for an empty hand.
    """
    strength: Dict[Suit, int] = {}
    for card in hand:
        strength[card.suit] = strength.get(card.suit, 0) + card.points
    if not strength:
        return None
    return max(strength, key=lambda s: strength[s])


def _close_bidding(state: RoundState) -> RoundState:
    result = bidding_result(state.bidding)
    assert result is not None
    winner = result.winner
    logger.debug("Bidding closed: seat %s wins at %s", winner, result.bid)
    state = replace(
        state,
        bidding=replace(state.bidding, bid_winner=winner),
        phase=Phase.SELECTING_TRUMP,
        current_seat=winner,
    )
    if state.seats[winner].is_bot:
        suit = strongest_suit(state.hand(winner))
        state = replace(state, trump=suit, phase=Phase.PLAYING)
    return state


def place_bid(state: RoundState, value: int, config: RulesConfig = DEFAULT_CONFIG) -> RoundState:
    """Bid ``value`` for the seat to speak; ``0`` passes."""
    if state.phase != Phase.BIDDING:
        logger.debug("Rejected bid %s in phase %s", value, state.phase.value)
        return state
    bidding = apply_bid(state.bidding, value, config)
    if bidding is state.bidding:
        return state
    new_state = replace(state, bidding=bidding, current_seat=bidding.current_seat)
    if bidding.closed:
        return _close_bidding(new_state)
    return new_state


def pass_bid(state: RoundState, config: RulesConfig = DEFAULT_CONFIG) -> RoundState:
    """Same as ``place_bid(state, 0)``."""
    return place_bid(state, PASS, config)


def select_trump(state: RoundState, suit: Suit) -> RoundState:
    """Trump choice by the bid winner; play starts with the bid winner leading."""
    if state.phase != Phase.SELECTING_TRUMP:
        logger.debug("Rejected trump %s in phase %s", suit, state.phase.value)
        return state
    try:
        suit = Suit(suit)
    except ValueError:
        logger.debug("Rejected unknown trump %r", suit)
        return state
    return replace(state, trump=suit, phase=Phase.PLAYING)


def legal_cards(state: RoundState) -> list[Card]:
    """Legal plays for the seat to act; empty outside the playing phase."""
    if state.phase != Phase.PLAYING:
        return []
    return legal_plays(state.hand(state.current_seat), state.lead_card)


def play_card(state: RoundState, card: Card) -> RoundState:
    """Play ``card`` for the seat to act and resolve the trick when it is full."""
    if state.phase != Phase.PLAYING:
        logger.debug("Rejected card %s in phase %s", card, state.phase.value)
        return state
    seat = state.current_seat
    if card not in legal_cards(state):
        logger.debug("Rejected card %s from seat %s: not a legal play", card, seat)
        return state

    hand = tuple(c for c in state.hand(seat) if c != card)
    seats = list(state.seats)
    seats[seat] = replace(seats[seat], hand=hand)
    trick = state.current_trick + (card.played(seat),)

    if len(trick) < len(state.seats):
        return replace(
            state,
            seats=tuple(seats),
            current_trick=trick,
            current_seat=next_seat(seat, len(state.seats)),
        )

    winner = trick_winner(trick, state.trump)
    points = trick_points(trick)
    scores = list(state.scores)
    scores[winner] += points
    tricks = state.tricks + (trick,)
    logger.debug("Trick %d to seat %s for %d points", len(tricks), winner, points)
    return replace(
        state,
        seats=tuple(seats),
        tricks=tricks,
        current_trick=(),
        scores=tuple(scores),
        current_seat=winner,
        phase=Phase.FINISHED if len(tricks) == TRICKS_PER_ROUND else Phase.PLAYING,
    )


def is_bot_turn(state: RoundState) -> bool:
    """A bot must act: bidding or playing with an automated seat to move."""
    if state.phase not in (Phase.BIDDING, Phase.PLAYING):
        return False
    return state.seats[state.current_seat].is_bot


def ranked_scores(state: RoundState) -> list[tuple[str, int]]:
    """(seat name, score) pairs, best first. Ties keep seat order."""
    pairs = [(seat.name, score) for seat, score in zip(state.seats, state.scores)]
    return sorted(pairs, key=lambda p: p[1], reverse=True)


def round_summary(state: RoundState) -> Dict[str, Any]:
    """Plain-data view of a round for display or JSON output."""
    winner = state.bid_winner
    return {
        "phase": state.phase.value,
        "trump": state.trump.value if state.trump is not None else None,
        "current_bid": state.current_bid,
        "bid_winner": state.seats[winner].id if winner is not None else None,
        "current_seat": state.seats[state.current_seat].id,
        "tricks_played": len(state.tricks),
        "scores": state.scores_by_id(),
        "bids": {seat.id: bid for seat, bid in zip(state.seats, state.bids)},
    }
