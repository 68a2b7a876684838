"""Remote participant client.

Connects to a host's join websocket, sends JOIN, and keeps a
``MirrorController`` up to date with every broadcast. There is no
reconnection: a dropped connection is reported once and the client stops.
"""

import asyncio
import contextlib
import logging
from urllib.parse import urlencode

import websockets
from websockets.exceptions import ConnectionClosed

from rummy.api.mirror import MirrorController

logger = logging.getLogger(__name__)


class MirrorClient:
    """Websocket transport for one mirror."""

    def __init__(self, base_url: str, game_id: str, player_id: str, name: str) -> None:
        """Initialize the client.

        Args:
            base_url: Host websocket root, e.g. ``ws://localhost:8000``
            game_id: Table to join
            player_id: Stable participant id
            name: Display name

        """
        self.uri = f"{base_url.rstrip('/')}/games/join?" + urlencode(
            {"game_id": game_id, "player_id": player_id, "name": name}
        )
        self._connection: websockets.ClientConnection | None = None
        self.controller = MirrorController(player_id, name, self._send)
        self._reader: asyncio.Task[None] | None = None
        self.updated = asyncio.Event()

    @property
    def is_connected(self) -> bool:
        """Check if the connection is open."""
        return self._connection is not None

    async def _send(self, text: str) -> None:
        if self._connection is None:
            logger.warning("Not connected, dropping message")
            return
        try:
            await self._connection.send(text)
        except (ConnectionClosed, OSError) as e:
            logger.warning("Send failed: %s", e)
            self._lost()

    def _lost(self) -> None:
        self._connection = None
        self.controller.connection_lost()
        self.updated.set()

    async def connect(self) -> MirrorController:
        """Open the connection, send JOIN and start reading broadcasts.

        Returns:
            The mirror controller fed by this client

        Raises:
            OSError: If the host cannot be reached
            websockets.exceptions.InvalidHandshake: If the host refuses the upgrade

        """
        logger.info("Connecting to %s", self.uri)
        self._connection = await websockets.connect(self.uri)
        await self.controller.join()
        self._reader = asyncio.create_task(self._read())
        return self.controller

    async def _read(self) -> None:
        connection = self._connection
        if connection is None:
            return
        try:
            async for frame in connection:
                if self.controller.receive(frame):
                    self.updated.set()
        except (ConnectionClosed, OSError) as e:
            logger.warning("Connection to host closed: %s", e)
        if self._connection is connection:
            self._lost()

    async def wait_for_update(self, timeout: float | None = None) -> bool:
        """Wait for the next broadcast (or connection loss).

        Returns:
            False if the timeout expired first

        """
        self.updated.clear()
        try:
            await asyncio.wait_for(self.updated.wait(), timeout)
        except TimeoutError:
            return False
        return True

    async def close(self) -> None:
        """Close the connection and stop reading."""
        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.close()
        if self._reader is not None:
            self._reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader
            self._reader = None
