"""Non-authoritative game controller.

A mirror never changes game state itself. It shows the last state the host
broadcast and forwards every local intent to the host as an ACTION message.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace

from rummy.api.controller import GameController
from rummy.api.messages import JoinMessage, JoinPayload, parse_host_message
from rummy.models.actions import Action
from rummy.models.enums import Notice
from rummy.models.game import GameView
from rummy.services.game_serializer import deserialize_view, serialize_action

logger = logging.getLogger(__name__)

Sender = Callable[[str], Awaitable[None]]


class MirrorController(GameController):
    """Mirror of the host's state for one remote participant."""

    def __init__(self, player_id: str, name: str, send: Sender) -> None:
        """Initialize the mirror.

        Args:
            player_id: Stable id chosen by this participant
            name: Display name
            send: Coroutine that delivers a text frame to the host

        """
        self.player_id = player_id
        self.name = name
        self._send = send
        self._view = GameView()
        self.updates_received = 0

    @property
    def view(self) -> GameView:
        """Last broadcast state."""
        return self._view

    @property
    def local_player_id(self) -> str:
        """This participant's id."""
        return self.player_id

    async def join(self) -> None:
        """Introduce this participant to the host."""
        message = JoinMessage(payload=JoinPayload(name=self.name, player_id=self.player_id))
        await self._send(message.to_wire())

    async def submit(self, action: Action) -> None:
        """Forward an intent to the host. Fire and forget."""
        logger.debug("Sending %s to host", action.type.value)
        await self._send(serialize_action(action).to_wire())

    def receive(self, raw: str | bytes) -> bool:
        """Replace the view with a host broadcast.

        Returns:
            True if the frame was a valid state update

        """
        message = parse_host_message(raw)
        if message is None:
            return False
        self._view = deserialize_view(message.payload)
        self.updates_received += 1
        return True

    def connection_lost(self) -> None:
        """Flag the view so the UI can tell the participant."""
        logger.warning("Lost connection to host")
        self._view = replace(self._view, notice=Notice.CONNECTION_LOST)
