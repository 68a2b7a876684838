"""WebSocket connection manager and hub."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import WebSocket, WebSocketDisconnect

from rummy.api.messages import JoinMessage, WireModel, parse_client_message

if TYPE_CHECKING:
    from rummy.api.game_handler import HostController

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections for hosted tables.

    Handles:
    - One connection per participant per table
    - Broadcasting state updates
    - Routing parsed client messages to each table's host
    """

    def __init__(self) -> None:
        """Initialize the connection manager."""
        # game_id -> player_id -> WebSocket
        self.active_connections: dict[str, dict[str, WebSocket]] = {}
        self.tables: dict[str, HostController] = {}

    async def connect(self, websocket: WebSocket, game_id: str, player_id: str) -> None:
        """Accept a new WebSocket connection for a participant.

        Args:
            websocket: WebSocket connection
            game_id: Game identifier
            player_id: Player identifier

        """
        await websocket.accept()

        if game_id not in self.active_connections:
            self.active_connections[game_id] = {}

        self.active_connections[game_id][player_id] = websocket
        logger.info("Player %s connected to game %s", player_id, game_id)

    def disconnect(self, game_id: str, player_id: str) -> None:
        """Remove a participant's WebSocket connection.

        Args:
            game_id: Game identifier
            player_id: Player identifier

        """
        if game_id in self.active_connections and player_id in self.active_connections[game_id]:
            del self.active_connections[game_id][player_id]
            logger.info("Player %s disconnected from game %s", player_id, game_id)

            if not self.active_connections[game_id]:
                del self.active_connections[game_id]

    async def broadcast_to_game(self, message: WireModel, game_id: str) -> None:
        """Broadcast message to every participant connected to a game.

        Args:
            message: Message to broadcast
            game_id: Game identifier

        """
        if game_id not in self.active_connections:
            return

        text = message.to_wire()
        disconnected_players = []
        for player_id, websocket in list(self.active_connections[game_id].items()):
            try:
                await websocket.send_text(text)
            except (WebSocketDisconnect, RuntimeError, ConnectionError, OSError):
                logger.warning("Connection lost to player %s", player_id)
                disconnected_players.append(player_id)

        for player_id in disconnected_players:
            self.disconnect(game_id, player_id)

    async def handle_player_messages(
        self, websocket: WebSocket, game_id: str, player_id: str
    ) -> None:
        """Feed a participant's frames to the table's host until they disconnect.

        The first frame must be a JOIN; anything else before it is dropped.

        Args:
            websocket: WebSocket connection
            game_id: Game identifier
            player_id: Player identifier

        """
        joined = False
        try:
            while True:
                data = await websocket.receive_text()
                message = parse_client_message(data)
                if message is None:
                    continue

                table = self.tables.get(game_id)
                if table is None:
                    logger.warning("Game %s not found", game_id)
                    continue

                if not joined:
                    if not isinstance(message, JoinMessage):
                        logger.warning("Player %s sent %s before JOIN", player_id, message.type)
                        continue
                    if message.payload.player_id != player_id:
                        logger.warning(
                            "Player %s tried to join as %s", player_id, message.payload.player_id
                        )
                        continue
                    joined = True

                logger.debug("Received %s from player %s in game %s", message.type, player_id, game_id)
                await table.handle_message(player_id, message)

        except WebSocketDisconnect:
            logger.info("Player %s disconnected from game %s", player_id, game_id)

        except (RuntimeError, ConnectionError, OSError) as e:
            logger.warning("Error handling message from %s: %s", player_id, e)

        self.disconnect(game_id, player_id)
        table = self.tables.get(game_id)
        if table is not None:
            await table.leave(player_id)

    def get_table(self, game_id: str) -> HostController | None:
        """Get a table's host by game id."""
        return self.tables.get(game_id)

    def add_table(self, table: HostController) -> None:
        """Register a table."""
        self.tables[table.game_id] = table

    async def remove_table(self, game_id: str) -> None:
        """Shut a table down and forget it."""
        table = self.tables.pop(game_id, None)
        if table is not None:
            await table.close()
            logger.info("Removed game %s", game_id)

    async def close_all(self) -> None:
        """Shut every table down."""
        for game_id in list(self.tables):
            await self.remove_table(game_id)


# Global WebSocket manager instance
websocket_manager = ConnectionManager()
