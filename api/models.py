"""Pydantic request/response models for the API."""

from pydantic import BaseModel, Field

from council.engine import playable_hand_indexes
from council.rules import HUMAN_INDEX, PHASE_INSTRUCTIONS, PHASE_ORDER
from council.state import Card, Event, GameState

# Validation constants (no magic numbers in validation)
MAX_VOTE_DELAY_SECONDS = 10.0
RECENT_EVENTS = 30


class GameCreateRequest(BaseModel):
    """Body for POST /games."""

    seed: int | None = Field(default=None, description="Seed for shuffles and automated votes; random when omitted")
    vote_delay: float | None = Field(
        default=None,
        ge=0,
        le=MAX_VOTE_DELAY_SECONDS,
        description="Seconds between ballots. Defaults to server configuration.",
    )
    spectate: bool = Field(
        default=False,
        description="If true, every participant's hand and deck order are visible in the state.",
    )


class SelectCardRequest(BaseModel):
    """Body for POST /games/{id}/select."""

    hand_index: int | None = Field(..., ge=0, description="Position in your hand, or null to clear the selection")


class CardPublic(BaseModel):
    id: str
    name: str
    type: str
    subtype: str
    factions: list[str]
    departments: list[str]
    tag_cost: int
    power_value: int
    effect: str


class ResourcesPublic(BaseModel):
    vote_tokens: int
    power_points: int
    gold_coins: int


class ParticipantPublic(BaseModel):
    """A seat at the table. Automated hands are only listed when spectating."""

    index: int
    name: str
    is_human: bool
    role: CardPublic
    hand: list[CardPublic] | None = Field(default=None, description="Cards in hand, oldest first")
    hand_count: int
    deck: list[CardPublic] | None = Field(default=None, description="Deck in draw order (spectate only)")
    deck_count: int
    discard: list[CardPublic]
    board: list[CardPublic]
    resources: ResourcesPublic


class BallotPublic(BaseModel):
    participant_index: int
    for_votes: int
    against_votes: int
    has_voted: bool


class TallyPublic(BaseModel):
    total_for: int
    total_against: int
    ballots: list[BallotPublic]


class EventPublic(BaseModel):
    kind: str
    turn_number: int
    phase: str
    message: str
    duration_ms: int
    participant_index: int | None = None
    card_id: str | None = None


class PhaseInfo(BaseModel):
    index: int
    name: str
    instructions: str


class GameStateResponse(BaseModel):
    """Public game state for GET /games/{id}."""

    game_id: str
    started: bool
    turn_number: int
    current_participant: int
    phase: PhaseInfo
    docket: CardPublic | None = None
    docket_proposer: int | None = None
    cards_played: dict[str, int]
    tally: TallyPublic
    vote_in_progress: bool
    next_vote_step_in: float | None = Field(default=None, description="Seconds until the next ballot or resolution")
    status: EventPublic | None = Field(default=None, description="Latest message; show for duration_ms")
    events: list[EventPublic] = Field(default_factory=list, description="Most recent messages, oldest first")
    participants: list[ParticipantPublic]
    selected_hand_index: int | None = None
    playable_hand_indexes: list[int] = Field(default_factory=list)
    games_completed: int = 0
    last_winner: int | None = Field(default=None, description="Index of the winner of the previous game")
    spectate: bool = False


def card_to_public(card: Card) -> CardPublic:
    return CardPublic(
        id=card.instance_id,
        name=card.name,
        type=card.type.value,
        subtype=card.subtype,
        factions=sorted(card.factions),
        departments=sorted(card.departments),
        tag_cost=card.tag_cost,
        power_value=card.power_value,
        effect=card.effect_text,
    )


def event_to_public(e: Event) -> EventPublic:
    return EventPublic(
        kind=e.kind.value,
        turn_number=e.turn_number,
        phase=e.phase.value,
        message=e.message,
        duration_ms=e.duration_ms,
        participant_index=e.participant_index,
        card_id=e.card_id,
    )


def phase_info(index: int) -> PhaseInfo:
    phase = PHASE_ORDER[index]
    return PhaseInfo(index=index, name=phase.value, instructions=PHASE_INSTRUCTIONS[phase])


def game_state_to_public(
    state: GameState,
    selected_index: int | None = None,
    spectate: bool = False,
    next_vote_step_in: float | None = None,
) -> GameStateResponse:
    """Build public response from GameState; automated hands stay hidden unless spectate."""
    participants_public = []
    for p in state.participants:
        show_hand = spectate or p.index == HUMAN_INDEX
        participants_public.append(
            ParticipantPublic(
                index=p.index,
                name=p.name,
                is_human=p.is_human,
                role=card_to_public(p.role),
                hand=[card_to_public(c) for c in p.hand] if show_hand else None,
                hand_count=len(p.hand),
                deck=[card_to_public(c) for c in p.deck] if spectate else None,
                deck_count=len(p.deck),
                discard=[card_to_public(c) for c in p.discard],
                board=[card_to_public(c) for c in p.board],
                resources=ResourcesPublic(
                    vote_tokens=p.resources.vote_tokens,
                    power_points=p.resources.power_points,
                    gold_coins=p.resources.gold_coins,
                ),
            )
        )
    tally = TallyPublic(
        total_for=state.tally.total_for,
        total_against=state.tally.total_against,
        ballots=[
            BallotPublic(
                participant_index=i,
                for_votes=b.for_votes,
                against_votes=b.against_votes,
                has_voted=b.has_voted,
            )
            for i, b in enumerate(state.tally.ballots)
        ],
    )
    latest = state.latest_message()
    return GameStateResponse(
        game_id=state.game_id,
        started=state.started,
        turn_number=state.turn_number,
        current_participant=state.current_participant,
        phase=phase_info(state.phase_index),
        docket=card_to_public(state.docket) if state.docket else None,
        docket_proposer=state.docket_proposer,
        cards_played={category.value: n for category, n in state.cards_played.items()},
        tally=tally,
        vote_in_progress=state.vote.in_progress,
        next_vote_step_in=next_vote_step_in,
        status=event_to_public(latest) if latest else None,
        events=[event_to_public(e) for e in state.events[-RECENT_EVENTS:]],
        participants=participants_public,
        selected_hand_index=selected_index,
        playable_hand_indexes=playable_hand_indexes(state) if state.participants else [],
        games_completed=state.games_completed,
        last_winner=state.last_winner,
        spectate=spectate,
    )
