"""
Voting engine: one ballot per participant in index order, then a single resolution.

A voting run is a small timed state machine (see VoteSequence). Each function here is
one discrete transition; the orchestrator decides when a transition is due.
"""

import copy
import logging
import random
from typing import Optional

from council.engine import (
    advance_cursor,
    discard_docket,
    emit,
    get_winner,
    reset_vote,
    start_game,
)
from council.rules import (
    LONG_MESSAGE_MS,
    MAX_EVENTS,
    SHORT_MESSAGE_MS,
    WIN_POWER_POINTS,
    VoteDirection,
)
from council.state import EventKind, GameState, VoteSequence, VoteTally

logger = logging.getLogger(__name__)


def agenda_passes(total_for: int, total_against: int, cost: int) -> bool:
    """An agenda passes with at least `cost` votes for and strictly more for than against."""
    return total_for >= cost and total_for > total_against


def begin_vote(state: GameState, now: float, delay: float) -> GameState:
    """Open a voting run on the docket with fresh ballots. Returns new state."""
    if state.docket is None:
        raise ValueError("No agenda on the docket")
    if state.vote.in_progress:
        raise ValueError("A vote is already in progress")
    state = copy.deepcopy(state)
    state.tally = VoteTally.empty(state.num_participants)
    state.vote = VoteSequence(in_progress=True, started_at=now, delay=delay, next_voter=0)
    emit(
        state,
        EventKind.VOTE_START,
        "Voting Phase started! All players will now cast their votes.",
        LONG_MESSAGE_MS,
        card_id=state.docket.instance_id,
    )
    return state


def get_next_voter(state: GameState) -> Optional[int]:
    """Index of the participant whose ballot comes next, or None when everyone has voted."""
    if not state.vote.in_progress:
        return None
    if state.vote.next_voter >= state.num_participants:
        return None
    return state.vote.next_voter


def ballot_is_due(state: GameState, now: float) -> bool:
    voter = get_next_voter(state)
    return voter is not None and now >= state.vote.ballot_due_at(voter)


def resolution_is_due(state: GameState, now: float) -> bool:
    return (
        state.vote.in_progress
        and get_next_voter(state) is None
        and now >= state.vote.resolution_due_at(state.num_participants)
    )


def cast_ballot(state: GameState, direction: Optional[VoteDirection]) -> GameState:
    """
    Record the next participant's ballot. With at least one vote token exactly one token is
    spent for a ballot of weight 1; with none the participant is marked as voted with an
    empty ballot (direction is then ignored). Returns new state.
    """
    voter = get_next_voter(state)
    if voter is None:
        raise ValueError("No ballot is pending")
    if direction is None and state.participants[voter].resources.vote_tokens >= 1:
        raise ValueError("A voter holding vote tokens must vote FOR or AGAINST")
    state = copy.deepcopy(state)
    p = state.participants[voter]
    ballot = state.tally.ballots[voter]

    if p.resources.vote_tokens >= 1:
        p.resources.vote_tokens -= 1
        if direction == VoteDirection.FOR:
            ballot.for_votes += 1
            state.tally.total_for += 1
        else:
            ballot.against_votes += 1
            state.tally.total_against += 1
        label = direction.value.upper()
        if p.is_human:
            message = f"{p.name} (You) votes {label} the Agenda!"
        else:
            message = f"{p.name} considers the Agenda. Votes {label}."
    else:
        message = f"{p.name} had no vote tokens."

    ballot.has_voted = True
    state.vote.next_voter = voter + 1
    emit(state, EventKind.BALLOT, message, SHORT_MESSAGE_MS, participant_index=voter)
    return state


def resolve_vote(state: GameState, rng: random.Random) -> GameState:
    """
    Settle the docket once every ballot is in. On a pass, everyone who voted for it gains
    the agenda's power value (1 when it has none). The docket goes to its proposer's
    discard, ballots are cleared and the turn moves on; a winner instead triggers a fresh
    deal. Returns new state.
    """
    if not state.vote.in_progress or not state.tally.all_voted():
        raise ValueError("Vote is not ready to resolve")
    state = copy.deepcopy(state)
    agenda = state.docket
    tally = state.tally

    passed = agenda_passes(tally.total_for, tally.total_against, agenda.tag_cost)
    if passed:
        award = agenda.power_value or 1
        supporters = [i for i, b in enumerate(tally.ballots) if b.for_votes > 0]
        for i in supporters:
            state.participants[i].resources.power_points += award
        emit(state, EventKind.VOTE_RESULT, f'Agenda "{agenda.name}" PASSED!', LONG_MESSAGE_MS, card_id=agenda.instance_id)
    else:
        emit(state, EventKind.VOTE_RESULT, f'Agenda "{agenda.name}" FAILED!', LONG_MESSAGE_MS, card_id=agenda.instance_id)
    logger.info(
        "Game %s: agenda %r %s (%d for, %d against, cost %d)",
        state.game_id,
        agenda.name,
        "passed" if passed else "failed",
        tally.total_for,
        tally.total_against,
        agenda.tag_cost,
    )

    discard_docket(state)
    reset_vote(state)

    winner = get_winner(state) if passed else None
    if winner is not None:
        return _declare_winner(state, winner, rng)
    return advance_cursor(state)


def _declare_winner(state: GameState, winner: int, rng: random.Random) -> GameState:
    """Announce the winner and deal a new game from the same catalog."""
    name = state.participants[winner].name
    emit(
        state,
        EventKind.VICTORY,
        f"{name} has reached {WIN_POWER_POINTS} Power Points and WINS THE GAME!",
        LONG_MESSAGE_MS,
        participant_index=winner,
    )
    logger.info("Game %s won by participant %d (%s)", state.game_id, winner, name)
    new_state = start_game(
        state.game_id,
        state.catalog,
        rng,
        num_players=state.num_participants,
        games_completed=state.games_completed + 1,
        last_winner=winner,
    )
    # keep the victory announcement ahead of the new deal, within the transcript cap
    new_state.events = (state.events + new_state.events)[-MAX_EVENTS:]
    return new_state
