"""Card model."""

from dataclasses import dataclass

from rummy.constants import (
    HIGH_CARD_SCORE,
    HIGH_CARD_THRESHOLD,
    LOW_CARD_SCORE,
    SKIP_SCORE,
    WILD_SCORE,
)
from rummy.models.enums import CardColor, CardKind


@dataclass(frozen=True)
class Card:
    """Represents a single card.

    Attributes:
        id: Unique card identifier within a deck (``card-<n>``)
        kind: NUMBER, WILD or SKIP
        color: One of the four playable colors, or the WILD/SKIP sentinel
        value: 1-12 for number cards; the fixed score value for wild (25) and skip (15)

    """

    id: str
    kind: CardKind
    color: CardColor
    value: int

    def is_number(self) -> bool:
        """Check if card is a plain number card."""
        return self.kind == CardKind.NUMBER

    def is_wild(self) -> bool:
        """Check if card is a wild."""
        return self.kind == CardKind.WILD

    def is_skip(self) -> bool:
        """Check if card is a skip."""
        return self.kind == CardKind.SKIP

    @property
    def score_value(self) -> int:
        """Penalty points this card is worth when left in hand at round end."""
        if self.is_wild():
            return WILD_SCORE
        if self.is_skip():
            return SKIP_SCORE
        if self.value >= HIGH_CARD_THRESHOLD:
            return HIGH_CARD_SCORE
        return LOW_CARD_SCORE

    @property
    def label(self) -> str:
        """Short display label (value, ``W`` or ``S``)."""
        if self.is_wild():
            return "W"
        if self.is_skip():
            return "S"
        return str(self.value)

    def __str__(self) -> str:
        """Return string representation of card."""
        if self.is_number():
            return f"{self.color.value.title()}{self.value}"
        return self.kind.value.title()


def number_card(card_id: str, color: CardColor, value: int) -> Card:
    """Build a number card."""
    return Card(card_id, CardKind.NUMBER, color, value)


def wild_card(card_id: str) -> Card:
    """Build a wild card."""
    return Card(card_id, CardKind.WILD, CardColor.WILD, WILD_SCORE)


def skip_card(card_id: str) -> Card:
    """Build a skip card."""
    return Card(card_id, CardKind.SKIP, CardColor.SKIP, SKIP_SCORE)
