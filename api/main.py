"""FastAPI app: create, advance, select, play and poll council games."""

import logging
import random
import time
import uuid

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from council.catalog import CatalogError, SetupError, load_catalog
from council.config import get_cards_path, get_seed, get_vote_delay
from council.engine import start_game
from council.rules import PHASE_ORDER
from council.state import EventKind, GameState
from api.game_store import (
    create as store_create,
    delete as store_delete,
    get as store_get,
    get_selected,
    list_games,
    set_selected,
    update as store_update,
)
from api.models import (
    GameCreateRequest,
    GameStateResponse,
    PhaseInfo,
    SelectCardRequest,
    game_state_to_public,
    phase_info,
)
from automa.orchestrator import (
    advance_phase,
    play_selected_card,
    run_due_vote_steps,
    seconds_until_next_vote_step,
    select_card,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Council Cards API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Monotonic clock for vote due times; tests patch this.
_clock = time.monotonic


def _entry_or_404(game_id: str) -> dict:
    entry = store_get(game_id)
    if not entry:
        raise HTTPException(404, "Game not found")
    return entry


def _pump(entry: dict) -> GameState:
    """Apply vote steps that have come due since the last request. Caller holds the lock."""
    before = entry["state"]
    state = run_due_vote_steps(before, entry["policy"], _clock())
    entry["state"] = state
    if state.games_completed != before.games_completed:
        # a win re-dealt every hand
        entry["selected_index"] = None
    return state


def _response(game_id: str, state: GameState) -> GameStateResponse:
    entry = store_get(game_id)
    spectate = entry.get("spectate", False) if entry else False
    return game_state_to_public(
        state,
        selected_index=get_selected(game_id),
        spectate=spectate,
        next_vote_step_in=seconds_until_next_vote_step(state, _clock()),
    )


def _deal(game_id: str, catalog, rng: random.Random) -> GameState:
    try:
        return start_game(game_id, catalog, rng)
    except SetupError as e:
        logger.warning("Game %s: setup failed: %s", game_id, e)
        raise HTTPException(409, str(e)) from None


@app.post("/games", response_model=dict, tags=["Games"], summary="Create game")
def create_game(body: GameCreateRequest | None = None):
    """Load the catalog and deal a new game. Returns game_id."""
    body = body or GameCreateRequest()
    try:
        catalog = load_catalog(get_cards_path())
    except CatalogError as e:
        logger.warning("Card catalog unavailable: %s", e)
        raise HTTPException(503, str(e)) from None
    seed = body.seed if body.seed is not None else get_seed()
    rng = random.Random(seed)
    vote_delay = body.vote_delay if body.vote_delay is not None else get_vote_delay()
    game_id = str(uuid.uuid4())
    state = _deal(game_id, catalog, rng)
    store_create(game_id, state, rng=rng, vote_delay=vote_delay, spectate=body.spectate)
    logger.info("Game %s created (seed=%s, vote_delay=%.2fs)", game_id, seed, vote_delay)
    return {"game_id": game_id}


@app.get("/games", response_model=list[str], tags=["Games"], summary="List game IDs")
def list_games_route():
    """List all game IDs."""
    return list_games()


@app.get("/games/{game_id}", response_model=GameStateResponse, tags=["Games"], summary="Get game state")
def get_game(game_id: str):
    """Get public game state, applying any vote steps that are due."""
    entry = _entry_or_404(game_id)
    with entry["lock"]:
        state = _pump(entry)
        return _response(game_id, state)


@app.delete("/games/{game_id}", tags=["Games"], summary="Delete game")
def delete_game(game_id: str):
    _entry_or_404(game_id)
    store_delete(game_id)
    return {"deleted": game_id}


@app.post("/games/{game_id}/restart", response_model=GameStateResponse, tags=["Games"], summary="Deal new game")
def restart_game(game_id: str):
    """Abandon the current game and deal a fresh one from the same catalog."""
    entry = _entry_or_404(game_id)
    with entry["lock"]:
        old = entry["state"]
        state = _deal(game_id, old.catalog, entry["policy"].rng)
        state.games_completed = old.games_completed
        state.last_winner = old.last_winner
        store_update(game_id, state)
        set_selected(game_id, None)
        return _response(game_id, state)


@app.post("/games/{game_id}/advance", response_model=GameStateResponse, tags=["Games"], summary="Advance phase")
def advance_game(game_id: str):
    """Finish the current phase. In the Voting Phase this starts the timed ballot run."""
    entry = _entry_or_404(game_id)
    with entry["lock"]:
        state = _pump(entry)
        state = advance_phase(state, entry["policy"], _clock(), vote_delay=entry["vote_delay"])
        store_update(game_id, state)
        if state.latest_message().kind != EventKind.REJECTED:
            set_selected(game_id, None)
        state = _pump(entry)
        return _response(game_id, state)


@app.post("/games/{game_id}/select", response_model=GameStateResponse, tags=["Games"], summary="Select hand card")
def select_hand_card(game_id: str, body: SelectCardRequest):
    """Select a card in your hand (null clears the selection)."""
    entry = _entry_or_404(game_id)
    with entry["lock"]:
        state = _pump(entry)
        state, selected = select_card(state, body.hand_index)
        store_update(game_id, state)
        set_selected(game_id, selected)
        return _response(game_id, state)


@app.post("/games/{game_id}/play", response_model=GameStateResponse, tags=["Games"], summary="Play selected card")
def play_game_card(game_id: str):
    """Play the selected card. Illegal plays leave the state unchanged and report why."""
    entry = _entry_or_404(game_id)
    with entry["lock"]:
        state = _pump(entry)
        state = play_selected_card(state, get_selected(game_id))
        store_update(game_id, state)
        if state.latest_message().kind != EventKind.REJECTED:
            set_selected(game_id, None)
        return _response(game_id, state)


@app.get("/phases", response_model=list[PhaseInfo], tags=["Rules"], summary="List phases")
def list_phases():
    """Phase names in turn order with their instructions."""
    return [phase_info(i) for i in range(len(PHASE_ORDER))]


@app.get("/health", tags=["System"], summary="Health check")
def health():
    return {"status": "ok"}
