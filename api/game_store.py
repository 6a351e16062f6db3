"""In-memory game store. One lock per game serialises commands, polls and vote steps."""

import random
import threading
from typing import Any

from automa.policy import ParticipantPolicy
from council.state import GameState

# game_id -> { state, policy, vote_delay, selected_index, spectate, lock }
_store: dict[str, dict[str, Any]] = {}
_store_lock = threading.Lock()


def create(
    game_id: str,
    state: GameState,
    rng: random.Random,
    vote_delay: float,
    spectate: bool = False,
) -> None:
    with _store_lock:
        _store[game_id] = {
            "state": state,
            "policy": ParticipantPolicy(rng=rng),
            "vote_delay": vote_delay,
            "selected_index": None,
            "spectate": spectate,
            "lock": threading.Lock(),
        }


def get(game_id: str) -> dict[str, Any] | None:
    return _store.get(game_id)


def update(game_id: str, state: GameState) -> None:
    if game_id in _store:
        _store[game_id]["state"] = state


def get_selected(game_id: str) -> int | None:
    entry = _store.get(game_id)
    if not entry:
        return None
    return entry.get("selected_index")


def set_selected(game_id: str, hand_index: int | None) -> None:
    """Remember which card of the human's hand is selected (None clears)."""
    if game_id in _store:
        _store[game_id]["selected_index"] = hand_index


def delete(game_id: str) -> None:
    with _store_lock:
        _store.pop(game_id, None)


def list_games() -> list[str]:
    return list(_store.keys())
