"""Orchestrator: drive phases and votes using the game engine and the participant policy."""

import logging
import math
from typing import Optional

from council.engine import (
    advance_cursor,
    clean_up,
    discard_down_to,
    draw_cards,
    is_card_playable,
    notice,
    play_card,
    play_cards,
    plays_remaining,
    reject,
)
from council.rules import (
    AUTOMA_PLAY_PHASES,
    HAND_LIMIT,
    HUMAN_INDEX,
    SHORT_MESSAGE_MS,
    VOTE_DELAY_SECONDS,
    Phase,
    VoteDirection,
)
from council.state import GameState
from council.voting import (
    ballot_is_due,
    begin_vote,
    cast_ballot,
    get_next_voter,
    resolution_is_due,
    resolve_vote,
)

from automa.policy import ParticipantPolicy

logger = logging.getLogger(__name__)

WAIT_FOR_VOTE = "Voting is currently in progress. Please wait."

_CATEGORY_LABELS = {
    Phase.PLANNING_OPERATIONS: "Operation",
    Phase.PLANNING_UTILITY: "Utility/Reaction",
    Phase.PLANNING_STAFF: "Staff",
    Phase.PLANNING_LOCATION: "Location",
}


def _run_automa_phase(state: GameState, policy: ParticipantPolicy) -> GameState:
    """Let the active automated participant act in the current phase."""
    index = state.current_participant
    p = state.participants[index]
    phase = state.phase

    if phase == Phase.DRAW:
        return draw_cards(state, index)

    if phase == Phase.AGENDA_PROPOSAL:
        hand_index = policy.select_agenda(p.hand)
        if hand_index is None or not is_card_playable(state, p.hand[hand_index]):
            return notice(state, f"{p.name} had no Agenda to propose.")
        return play_card(state, index, hand_index)

    if phase in AUTOMA_PLAY_PHASES:
        category = AUTOMA_PLAY_PHASES[phase]
        picked = policy.select_cards(p.hand, category, plays_remaining(state, category))
        if not picked:
            return notice(state, f"{p.name} had no {_CATEGORY_LABELS[phase]} card to play.")
        return play_cards(state, index, picked)

    if phase == Phase.PLANNING_ABILITIES:
        return notice(state, f"{p.name} considers using an ability.")

    if phase == Phase.CLEAN_UP:
        return clean_up(state)

    return state


def _run_human_phase(state: GameState) -> GameState:
    """Automatic parts of the human's turn; card plays go through play_selected_card."""
    if state.phase == Phase.DRAW:
        return draw_cards(state, HUMAN_INDEX)
    if state.phase == Phase.CLEAN_UP:
        state = discard_down_to(state, HUMAN_INDEX, HAND_LIMIT)
        return clean_up(state)
    return state


def advance_phase(
    state: GameState,
    policy: ParticipantPolicy,
    now: float,
    vote_delay: float = VOTE_DELAY_SECONDS,
) -> GameState:
    """
    Finish the current phase and move the turn cursor on.

    In the Voting Phase this opens the voting run instead; the cursor then moves only
    when the vote resolves. While a vote runs every call is refused with a wait notice.
    Returns new state.
    """
    if not state.started:
        return reject(state, "Start a game first.")
    if state.vote.in_progress:
        logger.debug("Game %s: advance refused, vote in progress", state.game_id)
        return reject(state, WAIT_FOR_VOTE, SHORT_MESSAGE_MS)

    if state.phase == Phase.VOTING:
        if state.docket is None:
            state = notice(state, "No Agenda to vote on. Advancing phase.")
            return advance_cursor(state)
        return begin_vote(state, now, vote_delay)

    if state.is_human_turn():
        state = _run_human_phase(state)
    else:
        state = _run_automa_phase(state, policy)
    return advance_cursor(state)


def select_card(state: GameState, hand_index: Optional[int]) -> tuple[GameState, Optional[int]]:
    """Validate a selection in the human's hand. Returns (state, selected index or None)."""
    if hand_index is None:
        return state, None
    if not state.started:
        return reject(state, "Start a game first."), None
    if not 0 <= hand_index < len(state.participants[HUMAN_INDEX].hand):
        return reject(state, "That card is not in your hand.", SHORT_MESSAGE_MS), None
    return state, hand_index


def play_selected_card(state: GameState, hand_index: Optional[int]) -> GameState:
    """Play the human's selected hand card if the current phase allows it. Returns new state."""
    if state.vote.in_progress:
        return reject(state, WAIT_FOR_VOTE, SHORT_MESSAGE_MS)
    if not state.started or not state.is_human_turn():
        return reject(state, "You can only play cards during your own turn.")
    hand = state.participants[HUMAN_INDEX].hand
    if hand_index is None or not 0 <= hand_index < len(hand):
        return reject(state, "Select a card from your hand first.", SHORT_MESSAGE_MS)
    card = hand[hand_index]
    if not is_card_playable(state, card):
        return reject(
            state,
            f'You cannot play a "{card.type.value}" card in the "{state.phase.value}" '
            "or have exceeded the limit for this phase.",
        )
    return play_card(state, HUMAN_INDEX, hand_index)


def _decide_ballot(state: GameState, policy: ParticipantPolicy) -> Optional[VoteDirection]:
    """Direction for the next voter; None when they hold no vote token."""
    voter = get_next_voter(state)
    p = state.participants[voter]
    if p.resources.vote_tokens < 1:
        return None
    if p.is_human:
        return VoteDirection.FOR
    return policy.vote_direction(p.role, state.docket)


def run_due_vote_steps(state: GameState, policy: ParticipantPolicy, now: float) -> GameState:
    """
    Apply every voting transition whose time has come, in order: pending ballots first,
    then the resolution. Safe to call at any time; with no vote running it is a no-op.
    """
    while state.vote.in_progress:
        if ballot_is_due(state, now):
            state = cast_ballot(state, _decide_ballot(state, policy))
        elif resolution_is_due(state, now):
            state = resolve_vote(state, policy.rng)
        else:
            break
    return state


def run_vote_to_completion(state: GameState, policy: ParticipantPolicy) -> GameState:
    """Cast every remaining ballot and resolve without waiting for the schedule."""
    return run_due_vote_steps(state, policy, now=math.inf)


def seconds_until_next_vote_step(state: GameState, now: float) -> Optional[float]:
    """Time until the next scheduled voting transition, or None when no vote is running."""
    if not state.vote.in_progress:
        return None
    voter = get_next_voter(state)
    if voter is not None:
        due = state.vote.ballot_due_at(voter)
    else:
        due = state.vote.resolution_due_at(state.num_participants)
    return max(0.0, due - now)
