"""Player model."""

from dataclasses import dataclass, replace

from rummy.models.card import Card
from rummy.models.meld import Meld


@dataclass(frozen=True)
class Player:
    """Represents a player in the game.

    Attributes:
        id: Unique player identifier
        name: Player's display name
        is_human: False for computer-controlled players
        hand: Current cards in hand; order is chosen by the owner
        melds: Melds this player laid down this round
        phase_index: Current phase (0-based); only grows, by one per round at most
        has_laid_down: Whether the player completed their phase this round
        score: Cumulative penalty score
        is_skipped: Set when the previous discarder played a skip

    """

    id: str
    name: str
    is_human: bool = True
    hand: tuple[Card, ...] = ()
    melds: tuple[Meld, ...] = ()
    phase_index: int = 0
    has_laid_down: bool = False
    score: int = 0
    is_skipped: bool = False

    @property
    def is_bot(self) -> bool:
        """Check if this is a computer-controlled player."""
        return not self.is_human

    def find_card(self, card_id: str) -> Card | None:
        """Get a card from the hand by ID."""
        for card in self.hand:
            if card.id == card_id:
                return card
        return None

    def without_cards(self, card_ids: set[str]) -> tuple[Card, ...]:
        """Hand with the given cards removed, order preserved."""
        return tuple(card for card in self.hand if card.id not in card_ids)

    def reset_round(self, hand: tuple[Card, ...]) -> "Player":
        """Return a copy with a fresh hand and cleared per-round state."""
        return replace(self, hand=hand, melds=(), has_laid_down=False, is_skipped=False)

    def __str__(self) -> str:
        """Return string representation."""
        bot_str = " (Bot)" if self.is_bot else ""
        return f"{self.name}{bot_str} - Phase {self.phase_index + 1} - Score: {self.score}"
