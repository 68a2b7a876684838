"""Base class for all bot strategies."""

import random
from abc import ABC, abstractmethod
from collections.abc import Sequence

from rummy.models.card import Card
from rummy.models.enums import GameState, Notice, RequirementKind, TurnPhase
from rummy.models.game import GameSnapshot, Transition
from rummy.models.player import Player
from rummy.models.turn import discard, draw, lay_down

MeldGroups = Sequence[tuple[RequirementKind, Sequence[Card]]]


class BaseBot(ABC):
    """Abstract base class for bot strategies.

    A bot plays a whole turn at once: draw, optionally lay down, discard.
    Subclasses decide where to draw from, what to lay down and what to
    discard; ``take_turn`` drives the turn state machine with those choices.
    """

    def __init__(self, player_id: str) -> None:
        """Initialize the bot.

        Args:
            player_id: ID of the player this bot controls

        """
        self.player_id = player_id

    @abstractmethod
    def wants_discard_pile(self, state: GameSnapshot, player: Player) -> bool:
        """Decide whether to draw the top discard instead of from the deck."""

    @abstractmethod
    def pick_meld(
        self, state: GameSnapshot, player: Player, rng: random.Random
    ) -> MeldGroups | None:
        """Choose groups to lay down this turn, or None to hold.

        Returns:
            One (kind, cards) group per requirement of the player's phase

        """

    @abstractmethod
    def pick_discard(self, state: GameSnapshot, player: Player) -> Card:
        """Choose the card that ends the turn."""

    def take_turn(self, state: GameSnapshot, rng: random.Random | None = None) -> Transition:
        """Play this bot's whole turn.

        Returns:
            The final transition; rejected with the unchanged state if the
            bot cannot act (not its turn, or a stalemate draw)

        """
        rng = rng or random.Random()  # noqa: S311
        player = state.current_player
        if state.state != GameState.PLAYING or player is None or player.id != self.player_id:
            return Transition(state=state, accepted=False, notice=Notice.NOT_YOUR_TURN)

        notice = None
        if state.turn_phase == TurnPhase.DRAW:
            from_discard = self.wants_discard_pile(state, player)
            drawn = draw(state, player.id, from_discard, rng)
            if not drawn.accepted and from_discard:
                drawn = draw(state, player.id, False, rng)
            if not drawn.accepted:
                return drawn
            state = drawn.state

        player = state.players[state.current_player_index]
        groups = self.pick_meld(state, player, rng)
        if groups:
            laid = lay_down(state, state.current_player_index, groups)
            state, notice = laid.state, laid.notice
            if state.state != GameState.PLAYING:
                return laid

        player = state.players[state.current_player_index]
        ended = discard(state, player.id, self.pick_discard(state, player).id)
        return Transition(state=ended.state, accepted=ended.accepted, notice=ended.notice or notice)

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.__class__.__name__} ({self.player_id})"
