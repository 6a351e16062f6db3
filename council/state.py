"""Game state types for the council card game."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from council.rules import (
    CATEGORY_BY_TYPE,
    PHASE_ORDER,
    CardCategory,
    CardType,
    Phase,
)


@dataclass(frozen=True)
class Card:
    """A card from the catalog. instance_id is unique per catalog record."""

    instance_id: str
    name: str
    type: CardType
    subtype: str = ""
    factions: frozenset[str] = frozenset()
    departments: frozenset[str] = frozenset()
    tag_cost: int = 0
    power_value: int = 0
    effect_text: str = ""

    def __deepcopy__(self, memo):
        # immutable; state copies share card objects
        return self

    @property
    def category(self) -> Optional[CardCategory]:
        """Playable category, or None for Councilmember / Incident cards."""
        return CATEGORY_BY_TYPE.get(self.type)


@dataclass
class Resources:
    """Per-participant resource pools."""

    vote_tokens: int = 0
    power_points: int = 0
    gold_coins: int = 0


@dataclass
class Participant:
    """One seat at the table. Index 0 is the human."""

    index: int
    role: Card
    is_human: bool = False
    hand: list[Card] = field(default_factory=list)  # oldest draw first
    deck: list[Card] = field(default_factory=list)  # front is the next draw
    discard: list[Card] = field(default_factory=list)
    board: list[Card] = field(default_factory=list)
    resources: Resources = field(default_factory=Resources)

    @property
    def name(self) -> str:
        return self.role.name


class EventKind(str, Enum):
    """Type of game event."""

    GAME_START = "game_start"
    PHASE_CHANGE = "phase_change"
    DRAW = "draw"
    DISCARD = "discard"
    PROPOSE = "propose"
    PLAY = "play"
    VOTE_START = "vote_start"
    BALLOT = "ballot"
    VOTE_RESULT = "vote_result"
    VICTORY = "victory"
    NOTICE = "notice"
    REJECTED = "rejected"


@dataclass
class Event:
    """A human-readable status message; duration_ms tells the UI how long to show it."""

    kind: EventKind
    turn_number: int
    phase: Phase
    message: str
    duration_ms: int
    participant_index: Optional[int] = None
    card_id: Optional[str] = None


@dataclass
class Ballot:
    """One participant's ballot in the current voting sequence."""

    for_votes: int = 0
    against_votes: int = 0
    has_voted: bool = False


@dataclass
class VoteTally:
    """Ballots for the docket currently under vote."""

    ballots: list[Ballot] = field(default_factory=list)
    total_for: int = 0
    total_against: int = 0

    @classmethod
    def empty(cls, num_participants: int) -> "VoteTally":
        return cls(ballots=[Ballot() for _ in range(num_participants)])

    def all_voted(self) -> bool:
        return bool(self.ballots) and all(b.has_voted for b in self.ballots)


@dataclass
class VoteSequence:
    """
    Timed state machine for one voting run.

    Ballot k (0-based, in participant order) is due at started_at + (k + 1) * delay;
    resolution is due one delay after the last ballot.
    """

    in_progress: bool = False
    started_at: float = 0.0
    delay: float = 0.0
    next_voter: int = 0

    def ballot_due_at(self, voter_index: int) -> float:
        return self.started_at + (voter_index + 1) * self.delay

    def resolution_due_at(self, num_participants: int) -> float:
        return self.started_at + (num_participants + 1) * self.delay


def empty_play_counters() -> dict[CardCategory, int]:
    return {category: 0 for category in CardCategory}


@dataclass
class GameState:
    """Full game state."""

    game_id: str
    participants: list[Participant] = field(default_factory=list)
    current_participant: int = 0
    phase_index: int = 0
    turn_number: int = 0
    docket: Optional[Card] = None
    docket_proposer: Optional[int] = None
    cards_played: dict[CardCategory, int] = field(default_factory=empty_play_counters)
    tally: VoteTally = field(default_factory=VoteTally)
    vote: VoteSequence = field(default_factory=VoteSequence)
    events: list[Event] = field(default_factory=list)
    catalog: list[Card] = field(default_factory=list)  # kept so a won game can be re-dealt
    games_completed: int = 0
    last_winner: Optional[int] = None
    started: bool = False

    @property
    def phase(self) -> Phase:
        return PHASE_ORDER[self.phase_index]

    @property
    def num_participants(self) -> int:
        return len(self.participants)

    @property
    def active(self) -> Participant:
        return self.participants[self.current_participant]

    def is_human_turn(self) -> bool:
        return bool(self.participants) and self.active.is_human

    def get_participant(self, index: int) -> Optional[Participant]:
        """Return participant by index or None."""
        if 0 <= index < len(self.participants):
            return self.participants[index]
        return None

    def latest_message(self) -> Optional[Event]:
        return self.events[-1] if self.events else None

    def all_cards_in_play(self) -> list[Card]:
        """Every card in some hand, deck, discard, board or the docket."""
        cards: list[Card] = []
        for p in self.participants:
            cards.extend(p.hand)
            cards.extend(p.deck)
            cards.extend(p.discard)
            cards.extend(p.board)
        if self.docket is not None:
            cards.append(self.docket)
        return cards
