"""Automated participants: decision policy and the orchestrator that applies it."""

from automa.orchestrator import (
    advance_phase,
    play_selected_card,
    run_due_vote_steps,
    run_vote_to_completion,
    seconds_until_next_vote_step,
    select_card,
)
from automa.policy import ParticipantPolicy, has_synergy

__all__ = [
    "advance_phase",
    "play_selected_card",
    "run_due_vote_steps",
    "run_vote_to_completion",
    "seconds_until_next_vote_step",
    "select_card",
    "ParticipantPolicy",
    "has_synergy",
]
