"""Tests for phase advancement, the human play path and timed voting."""

import random

from automa.orchestrator import (
    WAIT_FOR_VOTE,
    advance_phase,
    play_selected_card,
    run_due_vote_steps,
    run_vote_to_completion,
    seconds_until_next_vote_step,
    select_card,
)
from automa.policy import ParticipantPolicy
from council.catalog import load_catalog
from council.engine import start_game
from council.rules import HAND_SIZE, MAX_EVENTS, PHASE_ORDER, CardCategory, CardType, Phase, VoteDirection
from council.state import Card, EventKind, GameState


class _AlwaysAgainst(ParticipantPolicy):
    def vote_direction(self, role, agenda):
        return VoteDirection.AGAINST


def _make_game(seed: int = 42) -> GameState:
    return start_game("g1", load_catalog(), random.Random(seed))


def _at_phase(state: GameState, phase: Phase, participant: int = 0) -> GameState:
    state.phase_index = PHASE_ORDER.index(phase)
    state.current_participant = participant
    return state


def _agenda(tag_cost: int = 0, power_value: int = 1) -> Card:
    return Card(
        instance_id="agenda_x",
        name="Bike Lane Expansion",
        type=CardType.AGENDA,
        tag_cost=tag_cost,
        power_value=power_value,
    )


def _with_docket(state: GameState, proposer: int = 0, **kwargs) -> GameState:
    state = _at_phase(state, Phase.VOTING, participant=proposer)
    state.docket = _agenda(**kwargs)
    state.docket_proposer = proposer
    return state


def test_advance_phase_requires_started_game():
    state = GameState(game_id="g0")
    state2 = advance_phase(state, ParticipantPolicy(), now=0.0)
    assert state2.events[-1].kind == EventKind.REJECTED
    assert state2.phase_index == 0


def test_human_draw_phase():
    state = _at_phase(_make_game(), Phase.DRAW)
    state = advance_phase(state, ParticipantPolicy(), now=0.0)
    assert len(state.participants[0].hand) == HAND_SIZE + 2
    assert state.phase == Phase.AGENDA_PROPOSAL


def test_human_clean_up_discards_and_passes_turn():
    state = _at_phase(_make_game(), Phase.CLEAN_UP)
    extra = [Card(instance_id=f"x{i}", name=f"Extra {i}", type=CardType.STAFF) for i in range(4)]
    oldest = state.participants[0].hand[:2]
    state.participants[0].hand = state.participants[0].hand + extra
    state.cards_played[CardCategory.STAFF] = 1
    state = advance_phase(state, ParticipantPolicy(), now=0.0)
    assert len(state.participants[0].hand) == 7
    assert state.participants[0].discard == oldest
    assert state.cards_played[CardCategory.STAFF] == 0
    assert state.current_participant == 1
    assert state.phase == Phase.REFRESH


def test_full_round_visits_every_participant():
    state = _make_game()
    policy = ParticipantPolicy(rng=random.Random(7))
    seen = []
    for _ in range(len(PHASE_ORDER) * 5):
        if state.phase == Phase.REFRESH:
            seen.append(state.current_participant)
        state = advance_phase(state, policy, now=0.0, vote_delay=0.0)
        state = run_vote_to_completion(state, policy)
    assert seen == [0, 1, 2, 3, 4]
    assert state.current_participant == 0


def test_voting_without_docket_skips():
    state = _at_phase(_make_game(), Phase.VOTING, participant=2)
    state = advance_phase(state, ParticipantPolicy(), now=0.0)
    assert not state.vote.in_progress
    assert state.phase == Phase.PLANNING_OPERATIONS
    assert any("No Agenda to vote on" in e.message for e in state.events)


def test_advance_during_vote_is_refused():
    state = _with_docket(_make_game())
    policy = ParticipantPolicy(rng=random.Random(1))
    state = advance_phase(state, policy, now=0.0, vote_delay=1.0)
    assert state.vote.in_progress

    state2 = advance_phase(state, policy, now=0.5, vote_delay=1.0)
    assert state2.events[-1].message == WAIT_FOR_VOTE
    assert state2.phase_index == state.phase_index
    assert state2.current_participant == state.current_participant
    assert state2.vote == state.vote
    assert state2.tally == state.tally
    assert state2.participants == state.participants


def test_vote_steps_follow_schedule():
    state = _with_docket(_make_game(), tag_cost=0, power_value=2)
    policy = ParticipantPolicy(rng=random.Random(1))
    state = advance_phase(state, policy, now=0.0, vote_delay=1.0)

    state = run_due_vote_steps(state, policy, now=0.5)
    assert not state.tally.ballots[0].has_voted
    assert seconds_until_next_vote_step(state, 0.5) == 0.5

    state = run_due_vote_steps(state, policy, now=1.0)
    assert state.tally.ballots[0].has_voted
    assert state.tally.ballots[0].for_votes == 1  # human always votes for
    assert not state.tally.ballots[1].has_voted

    state = run_due_vote_steps(state, policy, now=5.0)
    assert state.tally.all_voted()
    assert state.vote.in_progress
    assert seconds_until_next_vote_step(state, 5.0) == 1.0

    state = run_due_vote_steps(state, policy, now=6.0)
    assert not state.vote.in_progress
    assert state.docket is None
    assert state.phase == Phase.PLANNING_OPERATIONS
    assert seconds_until_next_vote_step(state, 6.0) is None
    assert all(p.resources.vote_tokens == 2 for p in state.participants)


def test_vote_with_no_tokens_completes():
    state = _with_docket(_make_game())
    for p in state.participants:
        p.resources.vote_tokens = 0
    policy = ParticipantPolicy(rng=random.Random(1))
    state = advance_phase(state, policy, now=0.0, vote_delay=1.0)
    state = run_vote_to_completion(state, policy)
    assert not state.vote.in_progress
    assert all(p.resources.vote_tokens == 0 for p in state.participants)
    assert all(p.resources.power_points == 0 for p in state.participants)


def test_failed_vote_with_always_against_policy():
    state = _with_docket(_make_game(), tag_cost=0)
    policy = _AlwaysAgainst(rng=random.Random(1))
    state = advance_phase(state, policy, now=0.0, vote_delay=0.0)
    state = run_due_vote_steps(state, policy, now=0.0)
    assert not state.vote.in_progress
    assert all(p.resources.power_points == 0 for p in state.participants)
    assert any("FAILED" in e.message for e in state.events)


def test_automa_proposes_agenda():
    state = _at_phase(_make_game(), Phase.AGENDA_PROPOSAL, participant=1)
    agenda = _agenda()
    state.participants[1].hand = [Card(instance_id="s", name="Aide", type=CardType.STAFF), agenda]
    state = advance_phase(state, ParticipantPolicy(), now=0.0)
    assert state.docket == agenda
    assert state.docket_proposer == 1
    assert state.phase == Phase.AMENDMENTS


def test_automa_plays_up_to_limit():
    state = _at_phase(_make_game(), Phase.PLANNING_OPERATIONS, participant=3)
    ops = [Card(instance_id=f"o{i}", name=f"Op {i}", type=CardType.OPERATION) for i in range(3)]
    state.participants[3].hand = list(ops)
    state.participants[3].discard = []
    state = advance_phase(state, ParticipantPolicy(), now=0.0)
    assert state.participants[3].discard == ops[:2]
    assert state.participants[3].hand == ops[2:]
    assert state.cards_played[CardCategory.OPERATION] == 2


def test_automa_with_nothing_to_play():
    state = _at_phase(_make_game(), Phase.PLANNING_LOCATION, participant=2)
    state.participants[2].hand = []
    state = advance_phase(state, ParticipantPolicy(), now=0.0)
    assert "had no Location card to play" in state.events[-2].message
    assert state.phase == Phase.PLANNING_ABILITIES


def test_play_selected_card_wrong_phase():
    state = _at_phase(_make_game(), Phase.REFRESH)
    state.participants[0].hand[0] = _agenda()
    state2 = play_selected_card(state, 0)
    assert state2.events[-1].kind == EventKind.REJECTED
    assert state2.events[-1].message == (
        'You cannot play a "Agenda" card in the "Refresh Phase" or have exceeded the limit for this phase.'
    )
    assert state2.participants == state.participants


def test_play_selected_card_proposes_agenda():
    state = _at_phase(_make_game(), Phase.AGENDA_PROPOSAL)
    agenda = _agenda()
    state.participants[0].hand[2] = agenda
    state = play_selected_card(state, 2)
    assert state.docket == agenda
    assert agenda not in state.participants[0].hand
    assert len(state.participants[0].hand) == HAND_SIZE - 1

    # only one agenda per turn
    state.participants[0].hand[0] = Card(instance_id="a2", name="Second", type=CardType.AGENDA)
    state2 = play_selected_card(state, 0)
    assert state2.events[-1].kind == EventKind.REJECTED
    assert state2.docket == agenda


def test_play_selected_card_needs_selection_and_turn():
    state = _at_phase(_make_game(), Phase.AGENDA_PROPOSAL)
    assert play_selected_card(state, None).events[-1].kind == EventKind.REJECTED
    assert play_selected_card(state, 42).events[-1].kind == EventKind.REJECTED
    state = _at_phase(state, Phase.AGENDA_PROPOSAL, participant=1)
    assert "your own turn" in play_selected_card(state, 0).events[-1].message


def test_play_selected_card_during_vote():
    state = _with_docket(_make_game())
    state = advance_phase(state, ParticipantPolicy(), now=0.0, vote_delay=1.0)
    state2 = play_selected_card(state, 0)
    assert state2.events[-1].message == WAIT_FOR_VOTE
    assert state2.participants == state.participants


def test_select_card():
    state = _make_game()
    state2, selected = select_card(state, 3)
    assert selected == 3
    assert state2 is state
    state3, selected = select_card(state, 9)
    assert selected is None
    assert state3.events[-1].kind == EventKind.REJECTED
    assert select_card(state, None) == (state, None)


def test_long_game_keeps_cards_and_tokens():
    """Drive many turns; cards are conserved and tokens never go negative."""
    state = _make_game(seed=11)
    policy = ParticipantPolicy(rng=random.Random(11))
    expected_ids = {c.instance_id for c in state.all_cards_in_play()}
    for _ in range(len(PHASE_ORDER) * 5 * 4):
        state = advance_phase(state, policy, now=0.0, vote_delay=0.0)
        state = run_vote_to_completion(state, policy)
        cards = state.all_cards_in_play()
        assert len(cards) == len(expected_ids)
        assert {c.instance_id for c in cards} == expected_ids
        assert all(p.resources.vote_tokens >= 0 for p in state.participants)
        assert state.docket is None or state.phase in (Phase.AMENDMENTS, Phase.VOTING)


def test_long_game_transcript_stays_bounded():
    state = _make_game(seed=1)
    policy = ParticipantPolicy(rng=random.Random(1))
    for _ in range(len(PHASE_ORDER) * 5 * 10):
        state = advance_phase(state, policy, now=0.0, vote_delay=0.0)
        state = run_vote_to_completion(state, policy)
        assert len(state.events) <= MAX_EVENTS
    assert len(state.events) == MAX_EVENTS
