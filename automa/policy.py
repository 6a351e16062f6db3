"""Decision policy for automated participants: which cards to play and how to vote."""

import random
from typing import Optional

from council.rules import (
    VOTE_FOR_WITH_SYNERGY,
    VOTE_FOR_WITHOUT_SYNERGY,
    CardCategory,
    CardType,
    VoteDirection,
)
from council.state import Card


def has_synergy(role: Card, agenda: Card) -> bool:
    """Role shares a faction or a department with the agenda, or the agenda is worth power."""
    return (
        bool(role.factions & agenda.factions)
        or bool(role.departments & agenda.departments)
        or agenda.power_value > 0
    )


class ParticipantPolicy:
    """
    First-found card play and synergy-biased voting.

    Decisions never touch game state; the orchestrator applies them. The random
    generator is injected so games and tests can be replayed from a seed.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        for_with_synergy: float = VOTE_FOR_WITH_SYNERGY,
        for_without_synergy: float = VOTE_FOR_WITHOUT_SYNERGY,
    ):
        self.rng = rng or random.Random()
        self.for_with_synergy = for_with_synergy
        self.for_without_synergy = for_without_synergy

    def select_cards(self, hand: list[Card], category: CardCategory, limit: int) -> list[int]:
        """Hand indexes of the first `limit` cards of the category, in hand order."""
        if limit <= 0:
            return []
        picked: list[int] = []
        for i, card in enumerate(hand):
            if card.category == category:
                picked.append(i)
                if len(picked) >= limit:
                    break
        return picked

    def select_agenda(self, hand: list[Card]) -> Optional[int]:
        """Hand index of the first Agenda, or None."""
        for i, card in enumerate(hand):
            if card.type == CardType.AGENDA:
                return i
        return None

    def vote_direction(self, role: Card, agenda: Card) -> VoteDirection:
        """Independent weighted draw: likelier FOR when the role has synergy with the agenda."""
        p_for = self.for_with_synergy if has_synergy(role, agenda) else self.for_without_synergy
        return VoteDirection.FOR if self.rng.random() < p_for else VoteDirection.AGAINST

    def get_name(self) -> str:
        return self.__class__.__name__
