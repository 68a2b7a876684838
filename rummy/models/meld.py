"""Meld model."""

from dataclasses import dataclass, replace

from rummy.models.card import Card
from rummy.models.enums import RequirementKind


@dataclass(frozen=True)
class Meld:
    """A laid-down group of cards on the table.

    Melds only grow, by hits appending one card at a time, and are
    cleared with the table at the next round start.

    Attributes:
        id: Unique meld identifier within a round
        cards: Cards in the meld, in the order they were laid down
        kind: Requirement kind the meld satisfies
        owner_id: ID of the player who laid it down

    """

    id: str
    cards: tuple[Card, ...]
    kind: RequirementKind
    owner_id: str

    def with_card(self, card: Card) -> "Meld":
        """Return a copy with one more card appended."""
        return replace(self, cards=(*self.cards, card))

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.kind.value} [{', '.join(c.label for c in self.cards)}]"
