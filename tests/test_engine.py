"""Tests for the deck, deal, legal-play filter, trick evaluator and bidding."""
import random
from collections import Counter

from twotwenty.bidding import (
    PASS,
    PASSED,
    apply_bid,
    apply_pass,
    bidding_result,
    is_valid_bid,
    new_bidding,
)
from twotwenty.deal import deal_hands
from twotwenty.deck import (
    Card,
    Rank,
    Suit,
    cards_point_total,
    is_marriage,
    make_card,
    make_deck_32,
    marriages_in_hand,
    parse_card,
    shuffle_deck,
    sort_hand,
)
from twotwenty.play import compare_cards, legal_plays, trick_points, trick_winner


def _c(text: str, seat: int | None = None) -> Card:
    card = parse_card(text)
    return card.played(seat) if seat is not None else card


def test_deck_32_one_card_per_suit_and_rank():
    deck = make_deck_32()
    assert len(deck) == 32
    assert len(set((c.suit, c.rank) for c in deck)) == 32
    assert cards_point_total(deck) == 220


def test_card_points_by_rank():
    assert make_card(Suit.SPADES, Rank.ACE).points == 15
    for rank in (Rank.KING, Rank.QUEEN, Rank.JACK, Rank.TEN):
        assert make_card(Suit.HEARTS, rank).points == 10
    for rank in (Rank.NINE, Rank.EIGHT, Rank.SEVEN):
        assert make_card(Suit.CLUBS, rank).points == 0


def test_played_by_does_not_change_card_identity():
    card = make_card(Suit.DIAMONDS, Rank.QUEEN)
    played = card.played(2)
    assert played.played_by == 2
    assert card.played_by is None
    assert played == card
    assert hash(played) == hash(card)


def test_parse_card_forms():
    assert parse_card("AS") == make_card(Suit.SPADES, Rank.ACE)
    assert parse_card("10h") == make_card(Suit.HEARTS, Rank.TEN)
    assert parse_card("Q♦") == make_card(Suit.DIAMONDS, Rank.QUEEN)
    assert str(parse_card("7c")) == "7♣"


def test_parse_card_rejects_garbage():
    import pytest

    for bad in ("", "X", "1S", "AX"):
        with pytest.raises(ValueError):
            parse_card(bad)


def test_shuffle_is_a_permutation_and_leaves_input_alone():
    deck = make_deck_32()
    original = list(deck)
    shuffled = shuffle_deck(deck, random.Random(7))
    assert deck == original
    assert Counter(shuffled) == Counter(deck)
    assert shuffled is not deck


def test_deal_four_disjoint_hands_of_eight():
    deal = deal_hands(rng=random.Random(42))
    assert len(deal.hands) == 4
    for hand in deal.hands:
        assert len(hand) == 8
    all_cards = [c for hand in deal.hands for c in hand]
    assert len(all_cards) == 32
    assert set(all_cards) == set(make_deck_32())


def test_deal_fixed_deck_goes_in_seat_order():
    deal = deal_hands(deck=make_deck_32())
    # Deck order is suit-major, so each seat gets one whole suit.
    for hand, suit in zip(deal.hands, Suit):
        assert {c.suit for c in hand} == {suit}


def test_deal_rejects_short_deck():
    import pytest

    with pytest.raises(ValueError):
        deal_hands(deck=make_deck_32()[:30])


def test_sort_hand_groups_by_display_suit_then_rank():
    hand = [_c("7S"), _c("AH"), _c("KC"), _c("10H"), _c("9D")]
    assert [str(c) for c in sort_hand(hand)] == ["A♥", "10♥", "K♣", "9♦", "7♠"]


def test_marriage_detection():
    assert is_marriage([_c("KH"), _c("QH")])
    assert is_marriage([_c("QS"), _c("KS")])
    assert not is_marriage([_c("KH"), _c("QS")])
    assert not is_marriage([_c("KH"), _c("QH"), _c("AH")])
    assert marriages_in_hand([_c("KH"), _c("QH"), _c("KS"), _c("QC")]) == [Suit.HEARTS]


# ---- Legal plays ----


def test_legal_plays_when_leading_is_whole_hand():
    hand = [_c("AH"), _c("7S"), _c("9D")]
    assert legal_plays(hand, None) == hand


def test_legal_plays_must_follow_suit():
    hand = [_c("AH"), _c("7S"), _c("9S"), _c("KD")]
    assert legal_plays(hand, _c("QS", 0)) == [_c("7S"), _c("9S")]


def test_legal_plays_void_in_lead_suit_is_whole_hand():
    hand = [_c("AH"), _c("KD")]
    assert legal_plays(hand, _c("QS", 0)) == hand


# ---- Trick evaluation ----


def test_only_trump_wins_regardless_of_rank():
    trick = [_c("AS", 0), _c("KS", 1), _c("7H", 2), _c("QS", 3)]
    assert trick_winner(trick, Suit.HEARTS) == 2


def test_highest_of_lead_suit_wins_without_trump():
    trick = [_c("KS", 0), _c("AS", 1), _c("10S", 2), _c("JS", 3)]
    assert trick_winner(trick, None) == 1


def test_higher_trump_beats_lower_trump():
    trick = [_c("AS", 0), _c("7H", 1), _c("QH", 2), _c("8H", 3)]
    assert trick_winner(trick, Suit.HEARTS) == 2


def test_off_suit_discard_never_wins():
    trick = [_c("7S", 0), _c("AD", 1), _c("AC", 2), _c("8S", 3)]
    assert trick_winner(trick, Suit.HEARTS) == 3


def test_earlier_off_suit_card_stays_ahead_of_later_one():
    assert compare_cards(_c("7D"), _c("AC"), Suit.SPADES, Suit.HEARTS) == 1
    assert compare_cards(_c("KS"), _c("AS"), Suit.SPADES, None) == -1
    assert compare_cards(_c("KS"), _c("KS"), Suit.SPADES, None) == 0


def test_winner_is_the_seat_not_the_position():
    # Trick led by seat 2; positions and seats differ.
    trick = [_c("9C", 2), _c("AC", 3), _c("KC", 0), _c("10C", 1)]
    assert trick_winner(trick, Suit.DIAMONDS) == 3


def test_trick_points():
    trick = [_c("AS", 0), _c("KS", 1), _c("9D", 2), _c("7C", 3)]
    assert trick_points(trick) == 25


# ---- Bidding ----


def test_bidding_sequence_last_bidder_wins():
    state = new_bidding()
    state = apply_bid(state, 80)      # p1
    state = apply_bid(state, PASS)    # p2
    state = apply_bid(state, 100)     # p3
    state = apply_bid(state, PASS)    # p4
    assert not state.closed
    assert state.current_seat == 0
    state = apply_bid(state, PASS)    # p1
    assert state.closed
    assert state.active == (2,)
    assert state.pass_count == 3
    assert state.bids == (PASSED, PASSED, 100, PASSED)
    result = bidding_result(state)
    assert result is not None
    assert result.winner == 2
    assert result.bid == 100


def test_bid_must_raise_by_a_step():
    state = new_bidding()
    assert state.current_bid == 60
    assert not is_valid_bid(state, 60)
    assert not is_valid_bid(state, 70)
    assert not is_valid_bid(state, 240)
    assert is_valid_bid(state, 80)
    assert is_valid_bid(state, 220)
    assert apply_bid(state, 70) is state


def test_turn_skips_passed_seats():
    state = new_bidding()
    state = apply_pass(state)         # seat 0 out
    state = apply_bid(state, 80)      # seat 1
    state = apply_bid(state, 100)     # seat 2
    state = apply_bid(state, 120)     # seat 3
    assert state.current_seat == 1


def test_nobody_bids_last_seat_takes_the_floor():
    state = new_bidding()
    for _ in range(3):
        state = apply_pass(state)
    result = bidding_result(state)
    assert result is not None
    assert result.winner == 3
    assert result.bid == 60


def test_single_bidder_wins_when_the_rest_pass():
    state = new_bidding()
    state = apply_bid(state, 80)      # seat 0
    state = apply_pass(state)         # seat 1
    state = apply_pass(state)         # seat 2
    state = apply_pass(state)         # seat 3
    assert state.closed
    assert bidding_result(state) == (0, 80)


def test_closed_bidding_rejects_everything():
    state = new_bidding()
    for _ in range(3):
        state = apply_pass(state)
    assert apply_pass(state) is state
    assert apply_bid(state, 80) is state


def test_open_bidding_has_no_result():
    assert bidding_result(new_bidding()) is None
