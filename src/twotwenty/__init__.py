"""220 rules engine (four-player trick-taking game: bid, name trump, play 8 tricks)."""

__version__ = "0.1.0"

from .config import RulesConfig, DEFAULT_CONFIG, load_config, save_config
from .deck import Card, Rank, Suit, make_deck_32, shuffle_deck, cards_point_total, is_marriage
from .deal import Deal, deal_hands
from .play import legal_plays, compare_cards, trick_winner, trick_points
from .bidding import BidState, BiddingResult, PASS, PASSED, new_bidding, apply_bid, apply_pass, bidding_result
from .game import (
    Phase,
    Seat,
    RoundState,
    new_round,
    place_bid,
    pass_bid,
    select_trump,
    play_card,
    legal_cards,
    strongest_suit,
    ranked_scores,
    round_summary,
)
from .agents import PlaceholderBot, RandomAgent
from .table import ActionQueue, ManualClock, Table
