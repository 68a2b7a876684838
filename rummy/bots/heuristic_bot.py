"""Heuristic bot: quick, unvalidated play that keeps the table moving."""

import random

from rummy.bots.base_bot import BaseBot, MeldGroups
from rummy.constants import MAX_MELD_SELECTION
from rummy.models.card import Card
from rummy.models.game import GameSnapshot
from rummy.models.player import Player
from rummy.models.turn import pick_discard

DEFAULT_MELD_MIN_HAND = 6
DEFAULT_MELD_CHANCE = 0.15


class HeuristicBot(BaseBot):
    """Bot that plays a fixed, lightweight heuristic.

    Drawing:
    - Always from the deck

    Laying down:
    - Only before it has laid down this round, and only with a hand of at
      least ``meld_min_hand`` cards that exceeds the phase's total count
    - Chance grows with how far the hand exceeds ``meld_min_hand``
    - Takes the first N cards of the hand in order, one slice per
      requirement, without asking the validator whether they fit

    Discarding:
    - Highest-value number card, or the highest-value card if it holds none
    """

    def __init__(
        self,
        player_id: str,
        meld_min_hand: int = DEFAULT_MELD_MIN_HAND,
        meld_chance: float = DEFAULT_MELD_CHANCE,
    ) -> None:
        """Initialize heuristic bot."""
        super().__init__(player_id)
        self.meld_min_hand = meld_min_hand
        self.meld_chance = meld_chance

    def wants_discard_pile(self, _state: GameSnapshot, _player: Player) -> bool:
        """Never take from the discard pile."""
        return False

    def meld_probability(self, hand_size: int) -> float:
        """Chance of attempting a lay-down with a hand of this size."""
        if hand_size < self.meld_min_hand:
            return 0.0
        return min(1.0, self.meld_chance * (hand_size - self.meld_min_hand + 1))

    def pick_meld(
        self, state: GameSnapshot, player: Player, rng: random.Random
    ) -> MeldGroups | None:
        """Split the leading cards of the hand into one group per requirement."""
        if player.has_laid_down:
            return None

        phase = state.phase_for(player)
        needed = phase.total_count
        hand = player.hand
        if len(hand) <= needed or needed > MAX_MELD_SELECTION:
            return None
        if rng.random() >= self.meld_probability(len(hand)):
            return None

        groups = []
        position = 0
        for requirement in phase.requirements:
            groups.append((requirement.kind, hand[position : position + requirement.count]))
            position += requirement.count
        return groups

    def pick_discard(self, _state: GameSnapshot, player: Player) -> Card:
        """Discard the highest-value number card."""
        card = pick_discard(player.hand)
        if card is None:
            raise ValueError(f"Bot {self.player_id} has no card to discard")
        return card
