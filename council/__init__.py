"""Game engine for the council card game."""

from council.catalog import CatalogError, SetupError, build_catalog, load_catalog
from council.engine import (
    start_game,
    draw_cards,
    discard_down_to,
    clean_up,
    play_card,
    play_cards,
    is_card_playable,
    playable_hand_indexes,
    advance_cursor,
    get_winner,
)
from council.rules import CardType, CardCategory, Phase, VoteDirection, PHASE_ORDER
from council.state import GameState, Participant, Card, Resources, Event, VoteTally
from council.voting import agenda_passes, begin_vote, cast_ballot, resolve_vote

__all__ = [
    "CatalogError",
    "SetupError",
    "build_catalog",
    "load_catalog",
    "start_game",
    "draw_cards",
    "discard_down_to",
    "clean_up",
    "play_card",
    "play_cards",
    "is_card_playable",
    "playable_hand_indexes",
    "advance_cursor",
    "get_winner",
    "CardType",
    "CardCategory",
    "Phase",
    "VoteDirection",
    "PHASE_ORDER",
    "GameState",
    "Participant",
    "Card",
    "Resources",
    "Event",
    "VoteTally",
    "agenda_passes",
    "begin_vote",
    "cast_ballot",
    "resolve_vote",
]
