"""Game engine: pure state transitions, no decision making."""

import copy
import random
from typing import Optional

from council.catalog import SetupError
from council.rules import (
    BOARD_CATEGORIES,
    DRAW_PER_TURN,
    HAND_LIMIT,
    HAND_SIZE,
    HUMAN_INDEX,
    LONG_MESSAGE_MS,
    MAX_EVENTS,
    NUM_PLAYERS,
    PHASE_ORDER,
    PLAY_RULES,
    SHORT_MESSAGE_MS,
    STARTING_VOTES,
    WIN_POWER_POINTS,
    CardCategory,
    CardType,
)
from council.state import (
    Card,
    Event,
    EventKind,
    GameState,
    Participant,
    Resources,
    VoteSequence,
    VoteTally,
    empty_play_counters,
)


def emit(
    state: GameState,
    kind: EventKind,
    message: str,
    duration_ms: int = SHORT_MESSAGE_MS,
    participant_index: Optional[int] = None,
    card_id: Optional[str] = None,
) -> None:
    """Append event to state, dropping the oldest beyond MAX_EVENTS (mutates state)."""
    state.events.append(
        Event(
            kind=kind,
            turn_number=state.turn_number,
            phase=state.phase,
            message=message,
            duration_ms=duration_ms,
            participant_index=participant_index,
            card_id=card_id,
        )
    )
    if len(state.events) > MAX_EVENTS:
        del state.events[:-MAX_EVENTS]


def notice(state: GameState, message: str, duration_ms: int = SHORT_MESSAGE_MS) -> GameState:
    """Record an informational message. Returns new state."""
    state = copy.deepcopy(state)
    emit(state, EventKind.NOTICE, message, duration_ms)
    return state


def reject(state: GameState, message: str, duration_ms: int = LONG_MESSAGE_MS) -> GameState:
    """Record a refused action; nothing but the transcript changes. Returns new state."""
    state = copy.deepcopy(state)
    emit(state, EventKind.REJECTED, message, duration_ms)
    return state


def start_game(
    game_id: str,
    catalog: list[Card],
    rng: random.Random,
    num_players: int = NUM_PLAYERS,
    games_completed: int = 0,
    last_winner: Optional[int] = None,
) -> GameState:
    """
    Deal a new game: one Councilmember role per seat, the remaining cards shuffled and
    dealt round-robin into personal decks, then an opening hand from each deck.
    Raises SetupError when the catalog has fewer Councilmembers than seats.
    """
    councilmembers = [c for c in catalog if c.type == CardType.COUNCILMEMBER]
    others = [c for c in catalog if c.type != CardType.COUNCILMEMBER]
    if len(councilmembers) < num_players:
        raise SetupError(
            f"Not enough Councilmember cards for all players: need {num_players}, "
            f"catalog has {len(councilmembers)}."
        )

    roles = list(councilmembers)
    rng.shuffle(roles)
    deck = list(others)
    rng.shuffle(deck)

    participants: list[Participant] = []
    for i in range(num_players):
        participants.append(
            Participant(
                index=i,
                role=roles[i],
                is_human=(i == HUMAN_INDEX),
                resources=Resources(vote_tokens=STARTING_VOTES),
            )
        )
    for i, card in enumerate(deck):
        participants[i % num_players].deck.append(card)
    for p in participants:
        p.hand = p.deck[:HAND_SIZE]
        p.deck = p.deck[HAND_SIZE:]

    state = GameState(
        game_id=game_id,
        participants=participants,
        tally=VoteTally.empty(num_players),
        catalog=list(catalog),
        games_completed=games_completed,
        last_winner=last_winner,
        started=True,
    )
    emit(
        state,
        EventKind.GAME_START,
        f"New game dealt. You are {participants[HUMAN_INDEX].name}. Current Phase: {state.phase.value}.",
        LONG_MESSAGE_MS,
    )
    return state


def _draw(state: GameState, index: int, count: int) -> int:
    """Move up to count cards from the front of the deck to the hand. Returns cards drawn."""
    p = state.participants[index]
    n = min(count, len(p.deck))
    p.hand.extend(p.deck[:n])
    p.deck = p.deck[n:]
    return n


def draw_cards(state: GameState, index: int, count: int = DRAW_PER_TURN) -> GameState:
    """Draw for one participant, capped at the deck size. Returns new state."""
    state = copy.deepcopy(state)
    drawn = _draw(state, index, count)
    p = state.participants[index]
    who = "You" if p.is_human else p.name
    if drawn == 0:
        emit(state, EventKind.DRAW, f"{who} had no cards left to draw.", participant_index=index)
    else:
        noun = "card" if drawn == 1 else "cards"
        emit(state, EventKind.DRAW, f"{who} drew {drawn} {noun}.", participant_index=index)
    return state


def discard_down_to(state: GameState, index: int, limit: int = HAND_LIMIT) -> GameState:
    """Discard the oldest-drawn cards until the hand holds at most limit. Returns new state."""
    state = copy.deepcopy(state)
    p = state.participants[index]
    excess = len(p.hand) - limit
    if excess <= 0:
        emit(state, EventKind.NOTICE, "Hand size is within limit. No discards needed.", participant_index=index)
        return state
    emit(
        state,
        EventKind.DISCARD,
        f"You had {len(p.hand)} cards, discarding {excess} oldest cards.",
        LONG_MESSAGE_MS,
        participant_index=index,
    )
    p.discard.extend(p.hand[:excess])
    p.hand = p.hand[excess:]
    return state


def discard_docket(state: GameState) -> None:
    """Send any docket card to its proposer's discard (mutates state)."""
    if state.docket is None:
        return
    owner = state.docket_proposer if state.docket_proposer is not None else HUMAN_INDEX
    state.participants[owner].discard.append(state.docket)
    state.docket = None
    state.docket_proposer = None


def clean_up(state: GameState) -> GameState:
    """End-of-turn reset: play counters and docket. Returns new state."""
    state = copy.deepcopy(state)
    state.cards_played = empty_play_counters()
    discard_docket(state)
    return state


def is_card_playable(state: GameState, card: Card) -> bool:
    """True if the current phase accepts this card's category and its per-turn limit is not reached."""
    category = card.category
    if category is None:
        return False
    rule = PLAY_RULES[category]
    if state.phase not in rule.phases:
        return False
    if category == CardCategory.AGENDA and state.docket is not None:
        return False
    return state.cards_played[category] < rule.max_per_turn


def plays_remaining(state: GameState, category: CardCategory) -> int:
    """How many more cards of category may be played this turn."""
    return max(0, PLAY_RULES[category].max_per_turn - state.cards_played[category])


def playable_hand_indexes(state: GameState, index: int = HUMAN_INDEX) -> list[int]:
    """Hand positions the participant could legally play right now."""
    if state.current_participant != index or state.vote.in_progress:
        return []
    hand = state.participants[index].hand
    return [i for i, card in enumerate(hand) if is_card_playable(state, card)]


def _announce_effect(state: GameState, index: int, card: Card) -> None:
    p = state.participants[index]
    effect = card.effect_text or "No specific effect."
    emit(
        state,
        EventKind.PLAY,
        f'{p.name} plays "{card.name}" ({card.type.value}). Effect: "{effect}"',
        LONG_MESSAGE_MS,
        participant_index=index,
        card_id=card.instance_id,
    )


def _play(state: GameState, index: int, hand_index: int) -> Card:
    """Take the card out of the hand and route it (mutates state). Caller checks legality."""
    p = state.participants[index]
    card = p.hand.pop(hand_index)
    category = card.category
    state.cards_played[category] += 1
    if category == CardCategory.AGENDA:
        state.docket = card
        state.docket_proposer = index
        who = "You" if p.is_human else p.name
        emit(
            state,
            EventKind.PROPOSE,
            f'{who} proposed Agenda: "{card.name}".',
            LONG_MESSAGE_MS,
            participant_index=index,
            card_id=card.instance_id,
        )
    elif category in BOARD_CATEGORIES:
        p.board.append(card)
        _announce_effect(state, index, card)
    else:
        p.discard.append(card)
        _announce_effect(state, index, card)
    return card


def play_card(state: GameState, index: int, hand_index: int) -> GameState:
    """
    Play one card from a participant's hand: Agenda to the docket, Staff/Location to the
    board, Operation/Utility to the discard. Returns new state; legality is the caller's check.
    """
    if not 0 <= hand_index < len(state.participants[index].hand):
        raise IndexError(f"hand index {hand_index} out of range")
    state = copy.deepcopy(state)
    _play(state, index, hand_index)
    return state


def play_cards(state: GameState, index: int, hand_indexes: list[int]) -> GameState:
    """Play several cards at once; indexes refer to the hand before any card is removed."""
    state = copy.deepcopy(state)
    hand = state.participants[index].hand
    chosen = [hand[i] for i in sorted(set(hand_indexes))]
    for card in chosen:
        _play(state, index, hand.index(card))
    return state


def advance_cursor(state: GameState) -> GameState:
    """
    Move to the next phase; wrapping past the last phase hands the turn to the next
    participant. This is the only place the active participant changes. Returns new state.
    """
    state = copy.deepcopy(state)
    next_index = state.phase_index + 1
    if next_index >= len(PHASE_ORDER):
        next_index = 0
        state.current_participant = (state.current_participant + 1) % state.num_participants
        state.turn_number += 1
    state.phase_index = next_index
    emit(
        state,
        EventKind.PHASE_CHANGE,
        f"It's now {state.active.name}'s turn. Current Phase: {state.phase.value}.",
        LONG_MESSAGE_MS,
        participant_index=state.current_participant,
    )
    return state


def get_winner(state: GameState) -> Optional[int]:
    """First participant (by index) at or above the win threshold, or None."""
    for p in state.participants:
        if p.resources.power_points >= WIN_POWER_POINTS:
            return p.index
    return None


def reset_vote(state: GameState) -> None:
    """Clear ballots and the voting sequence (mutates state)."""
    state.tally = VoteTally.empty(state.num_participants)
    state.vote = VoteSequence()
