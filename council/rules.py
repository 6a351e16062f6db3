"""Game rules and constants for the council card game."""

from dataclasses import dataclass
from enum import Enum


class CardType(str, Enum):
    """Card types as printed in the catalog."""

    AGENDA = "Agenda"
    OPERATION = "Operation"
    UTILITY_REACTION = "Utility/Reaction"
    STAFF = "Staff"
    LOCATION = "Location"
    COUNCILMEMBER = "Councilmember"
    INCIDENT = "Incident"


# Catalog spellings that map onto a CardType ("Event" is printed on some Operations)
CARD_TYPE_ALIASES = {
    "Event": CardType.OPERATION,
}


class CardCategory(str, Enum):
    """Playable categories tracked by the per-turn counters."""

    AGENDA = "agenda"
    OPERATION = "operation"
    UTILITY_REACTION = "utility_reaction"
    STAFF = "staff"
    LOCATION = "location"


CATEGORY_BY_TYPE = {
    CardType.AGENDA: CardCategory.AGENDA,
    CardType.OPERATION: CardCategory.OPERATION,
    CardType.UTILITY_REACTION: CardCategory.UTILITY_REACTION,
    CardType.STAFF: CardCategory.STAFF,
    CardType.LOCATION: CardCategory.LOCATION,
}

# Played cards of these categories stay on the owner's board; the rest are discarded
BOARD_CATEGORIES = (CardCategory.STAFF, CardCategory.LOCATION)


class Phase(str, Enum):
    """Phases of one participant's turn."""

    REFRESH = "Refresh Phase"
    DRAW = "Draw Phase"
    AGENDA_PROPOSAL = "Council Phase: Agenda Proposal"
    AMENDMENTS = "Council Phase: Amendments"
    VOTING = "Voting Phase"
    PLANNING_OPERATIONS = "Planning Phase: Operations"
    PLANNING_UTILITY = "Planning Phase: Utility/Reaction"
    PLANNING_STAFF = "Planning Phase: Staff"
    PLANNING_LOCATION = "Planning Phase: Location Abilities"
    PLANNING_ABILITIES = "Planning Phase: Abilities"
    INCIDENT = "Incident Phase"
    CLEAN_UP = "Clean-Up Phase"


# Order of phases within a turn; after CLEAN_UP the next participant starts at REFRESH
PHASE_ORDER = (
    Phase.REFRESH,
    Phase.DRAW,
    Phase.AGENDA_PROPOSAL,
    Phase.AMENDMENTS,
    Phase.VOTING,
    Phase.PLANNING_OPERATIONS,
    Phase.PLANNING_UTILITY,
    Phase.PLANNING_STAFF,
    Phase.PLANNING_LOCATION,
    Phase.PLANNING_ABILITIES,
    Phase.INCIDENT,
    Phase.CLEAN_UP,
)

PHASE_INSTRUCTIONS = {
    Phase.REFRESH: "Ready all exhausted cards and remove temporary effects.",
    Phase.DRAW: "The active player draws 2 cards.",
    Phase.AGENDA_PROPOSAL: "You may play 1 Agenda card from your hand to the Council Docket. Select a card and play it.",
    Phase.AMENDMENTS: "Players may play 1 Utility/Reaction card to modify the proposed Agenda.",
    Phase.VOTING: "All players will now cast their vote on the proposed Agenda.",
    Phase.PLANNING_OPERATIONS: "You may play up to 2 Operation (Event) cards per turn.",
    Phase.PLANNING_UTILITY: "You may play 1 Utility/Reaction card per turn.",
    Phase.PLANNING_STAFF: "You may play up to 1 Staff card per turn.",
    Phase.PLANNING_LOCATION: "You may play up to 2 Location cards from your hand onto your board.",
    Phase.PLANNING_ABILITIES: "You may use Councilmember or Department abilities.",
    Phase.INCIDENT: "Resolve one Incident card or triggered effects. Incidents impose penalties.",
    Phase.CLEAN_UP: "Discard down to 7 cards in hand. Pass the first-player token. New turn starts on the next phase.",
}


@dataclass(frozen=True)
class PlayRule:
    """How many cards of a category may be played per turn, and in which phases."""

    max_per_turn: int
    phases: tuple[Phase, ...]


# Shared by the human play path and the automated participants
PLAY_RULES = {
    CardCategory.AGENDA: PlayRule(max_per_turn=1, phases=(Phase.AGENDA_PROPOSAL,)),
    CardCategory.UTILITY_REACTION: PlayRule(
        max_per_turn=1, phases=(Phase.AMENDMENTS, Phase.PLANNING_UTILITY)
    ),
    CardCategory.OPERATION: PlayRule(max_per_turn=2, phases=(Phase.PLANNING_OPERATIONS,)),
    CardCategory.STAFF: PlayRule(max_per_turn=1, phases=(Phase.PLANNING_STAFF,)),
    CardCategory.LOCATION: PlayRule(max_per_turn=2, phases=(Phase.PLANNING_LOCATION,)),
}

# Planning phases in which automated participants play cards from hand
AUTOMA_PLAY_PHASES = {
    Phase.PLANNING_OPERATIONS: CardCategory.OPERATION,
    Phase.PLANNING_UTILITY: CardCategory.UTILITY_REACTION,
    Phase.PLANNING_STAFF: CardCategory.STAFF,
    Phase.PLANNING_LOCATION: CardCategory.LOCATION,
}


class VoteDirection(str, Enum):
    """Direction of a ballot."""

    FOR = "for"
    AGAINST = "against"


# Table setup
NUM_PLAYERS = 5  # 1 human + 4 automated
HUMAN_INDEX = 0
HAND_SIZE = 5
DRAW_PER_TURN = 2
STARTING_VOTES = 3
HAND_LIMIT = 7

# Victory condition
WIN_POWER_POINTS = 15

# Seconds between consecutive ballots in a voting sequence
VOTE_DELAY_SECONDS = 1.0

# Automated vote probabilities
VOTE_FOR_WITH_SYNERGY = 0.8
VOTE_FOR_WITHOUT_SYNERGY = 0.3

# Display durations for status messages (milliseconds)
SHORT_MESSAGE_MS = 2000
LONG_MESSAGE_MS = 3000

# Transcript length kept on the game state; older messages are dropped
MAX_EVENTS = 200
