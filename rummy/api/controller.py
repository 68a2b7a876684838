"""Common interface for the authoritative host and the mirrors."""

from abc import ABC, abstractmethod

from rummy.models.actions import Action, Discard, Draw, Hit, MeldCards, Reorder
from rummy.models.enums import GameState
from rummy.models.game import GameView
from rummy.models.player import Player
from rummy.models.turn import sort_moves


class GameController(ABC):
    """What a UI or other consumer needs from a game, host or not.

    Reads go through ``view``. Intents are stamped with the local player's
    id and handed to ``submit``; what happens next is up to the controller.
    """

    @property
    @abstractmethod
    def view(self) -> GameView:
        """Current read-facing state."""

    @property
    @abstractmethod
    def local_player_id(self) -> str:
        """ID of the participant using this controller."""

    @abstractmethod
    async def submit(self, action: Action) -> None:
        """Execute or forward an intent."""

    @property
    def local_player(self) -> Player | None:
        """The local participant's seat, once the game has started."""
        return self.view.get_player(self.local_player_id)

    @property
    def is_my_turn(self) -> bool:
        """Check if the local participant holds the turn."""
        current = self.view.current_player
        return (
            self.view.state == GameState.PLAYING
            and current is not None
            and current.id == self.local_player_id
        )

    async def draw(self, from_discard: bool = False) -> None:
        """Draw from the deck or the discard pile."""
        await self.submit(Draw(self.local_player_id, from_discard))

    async def discard(self, card_id: str) -> None:
        """Discard a card to end the turn."""
        await self.submit(Discard(self.local_player_id, card_id))

    async def meld(self, card_ids: list[str]) -> None:
        """Lay down the current phase."""
        await self.submit(MeldCards(self.local_player_id, tuple(card_ids)))

    async def hit(self, card_id: str, meld_id: str) -> None:
        """Add a card to a meld on the table."""
        await self.submit(Hit(self.local_player_id, card_id, meld_id))

    async def reorder(self, from_index: int, to_index: int) -> None:
        """Move a card within the local hand."""
        await self.submit(Reorder(self.local_player_id, from_index, to_index))

    async def sort_hand(self) -> None:
        """Sort the local hand by color, then value, one reorder at a time."""
        player = self.local_player
        if player is None:
            return
        for from_index, to_index in sort_moves(player.hand):
            await self.reorder(from_index, to_index)
