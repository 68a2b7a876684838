"""Authoritative game controller.

The host owns the only ``GameSnapshot`` of a table. Joins, actions, timer
ticks, bot turns and round changes are applied strictly one at a time, and
every change is broadcast to all connected participants as a STATE_UPDATE.
"""

import asyncio
import logging
import random
from typing import TYPE_CHECKING

from rummy.api.controller import GameController
from rummy.api.messages import ActionMessage, JoinMessage
from rummy.bots import BaseBot, HeuristicBot
from rummy.config import Settings, settings
from rummy.constants import BOT_NAMES, TIMER_TICK_SECONDS
from rummy.models.actions import Action
from rummy.models.enums import GameState, Notice
from rummy.models.game import GameSnapshot, GameView, Transition
from rummy.models.player import Player
from rummy.models.round import next_round, start_game
from rummy.models.turn import apply_action, auto_play, tick, timed_out
from rummy.services.game_serializer import deserialize_action, state_update
from rummy.services.phase_provider import PhaseProvider, StandardPhaseProvider, resolve_phases
from rummy.services.turn_timer import TurnTimer

if TYPE_CHECKING:
    from rummy.api.websocket import ConnectionManager

logger = logging.getLogger(__name__)

HOST_SUFFIX = " (Host)"


class HostController(GameController):
    """Runs one table and replicates its state.

    Attributes:
        game_id: Table identifier used for broadcasts
        host_id: Player id of the hosting participant
        lobby: Joined participants (player_id -> display name), host first
        bots: Bot strategies by player id, filled at game start

    """

    def __init__(
        self,
        manager: "ConnectionManager",
        game_id: str,
        host_id: str,
        host_name: str,
        theme: str | None = None,
        provider: PhaseProvider | None = None,
        rng: random.Random | None = None,
        config: Settings = settings,
        tick_interval: float = TIMER_TICK_SECONDS,
    ) -> None:
        """Initialize the host.

        Args:
            manager: Connection manager used to reach participants
            game_id: Table identifier
            host_id: Hosting participant's player id
            host_name: Hosting participant's display name
            theme: Optional theme for generated phases
            provider: Source of themed phases
            rng: Random source for shuffles and bots
            config: Table and bot settings
            tick_interval: Seconds between countdown ticks

        """
        self.manager = manager
        self.game_id = game_id
        self.host_id = host_id
        self.theme = theme
        self.provider = provider or StandardPhaseProvider()
        self.rng = rng or random.Random()  # noqa: S311
        self.config = config
        self.lobby: dict[str, str] = {host_id: f"{host_name}{HOST_SUFFIX}"}
        self.bots: dict[str, BaseBot] = {}
        self.snapshot = GameSnapshot(
            turn_duration=config.turn_duration, time_left=config.turn_duration
        )
        self.timer = TurnTimer(self.on_tick, tick_interval)
        self._lock = asyncio.Lock()
        self._bot_task: asyncio.Task[None] | None = None
        self._round_task: asyncio.Task[None] | None = None
        self._notice: Notice | None = None

    # --- Read-facing interface ---

    @property
    def view(self) -> GameView:
        """Current state as every participant sees it."""
        return self.snapshot.to_view(tuple(self.lobby.values()), self._notice)

    @property
    def local_player_id(self) -> str:
        """The hosting participant's id."""
        return self.host_id

    async def submit(self, action: Action) -> Transition:
        """Apply an intent and broadcast the result."""
        async with self._lock:
            transition = apply_action(
                self.snapshot, action, self.rng, self.config.max_meld_selection
            )
            if transition.accepted:
                logger.info(
                    "Game %s: %s by %s", self.game_id, action.type.value, action.player_id
                )
            else:
                logger.warning(
                    "Game %s: rejected %s from %s (%s)",
                    self.game_id,
                    action.type.value,
                    action.player_id,
                    transition.notice,
                )
            await self._commit(transition)
        return transition

    # --- Incoming messages ---

    async def handle_message(self, player_id: str, message: JoinMessage | ActionMessage) -> None:
        """Route a parsed client message.

        Args:
            player_id: Participant the connection belongs to
            message: Parsed message

        """
        match message:
            case JoinMessage():
                await self.join(player_id, message.payload.name)
            case ActionMessage():
                action = deserialize_action(message)
                if action.player_id != player_id:
                    logger.warning(
                        "Game %s: %s sent an action for %s, dropping",
                        self.game_id,
                        player_id,
                        action.player_id,
                    )
                    return
                await self.submit(action)
            case _:
                logger.warning("Game %s: unknown message %r", self.game_id, message)

    async def join(self, player_id: str, name: str) -> bool:
        """Add a participant to the lobby.

        Returns:
            True if the participant is (now) in the lobby

        """
        async with self._lock:
            if player_id in self.lobby:
                await self._broadcast()
                return True
            if self.snapshot.state != GameState.LOBBY:
                logger.warning("Game %s: %s tried to join after start", self.game_id, name)
                return False
            if len(self.lobby) >= self.config.table_size:
                logger.warning("Game %s: table full, %s not seated", self.game_id, name)
                return False

            self.lobby[player_id] = name
            logger.info("Game %s: %s joined (%d/%d)", self.game_id, name, len(self.lobby), self.config.table_size)
            await self._broadcast()
        return True

    async def leave(self, player_id: str) -> None:
        """Forget a participant who disconnected before the game started."""
        async with self._lock:
            if self.snapshot.state != GameState.LOBBY or player_id == self.host_id:
                return
            name = self.lobby.pop(player_id, None)
            if name is not None:
                logger.info("Game %s: %s left the lobby", self.game_id, name)
                await self._broadcast()

    # --- Game lifecycle ---

    def _seat_players(self) -> list[Player]:
        humans = [Player(id=pid, name=name, is_human=True) for pid, name in self.lobby.items()]
        open_seats = max(0, self.config.table_size - len(humans))
        names = self.rng.sample(BOT_NAMES, open_seats)
        bots = [
            Player(id=f"bot-{i}", name=names[i], is_human=False) for i in range(open_seats)
        ]
        self.bots = {
            bot.id: HeuristicBot(
                bot.id,
                meld_min_hand=self.config.bot_meld_min_hand,
                meld_chance=self.config.bot_meld_chance,
            )
            for bot in bots
        }
        return humans + bots

    async def start(self) -> bool:
        """Resolve phases, fill empty seats with bots and deal the first round.

        Returns:
            True if the game started

        """
        async with self._lock:
            if self.snapshot.state != GameState.LOBBY:
                logger.warning("Game %s already started", self.game_id)
                return False

            phases, fell_back = await resolve_phases(self.provider, self.theme)
            players = self._seat_players()
            snapshot = start_game(
                players,
                phases,
                self.rng,
                hand_size=self.config.hand_size,
                turn_duration=self.config.turn_duration,
            )
            notice = Notice.PROVIDER_FALLBACK if fell_back else None
            await self._commit(Transition(state=snapshot, notice=notice))

        if self.config.turn_duration > 0:
            self.timer.start()
        return True

    async def next_round(self) -> bool:
        """Deal the next round after a ROUND_OVER.

        Returns:
            True if a new round was dealt

        """
        async with self._lock:
            snapshot = next_round(self.snapshot, self.rng, self.config.hand_size)
            if snapshot is None:
                return False
            logger.info("Game %s: starting round %d", self.game_id, snapshot.round_number)
            await self._commit(Transition(state=snapshot))
        return True

    async def close(self) -> None:
        """Stop the timer and any pending bot or round task."""
        await self.timer.stop()
        for task in (self._bot_task, self._round_task):
            if task is not None and task is not asyncio.current_task():
                task.cancel()
        self._bot_task = None
        self._round_task = None

    # --- Countdown ---

    async def on_tick(self) -> None:
        """Count the turn down and auto-play a human whose time ran out."""
        async with self._lock:
            snapshot = tick(self.snapshot)
            if snapshot is self.snapshot:
                return
            transition = Transition(state=snapshot)
            current = snapshot.current_player
            if timed_out(snapshot) and current is not None and current.is_human:
                logger.info("Game %s: %s timed out", self.game_id, current.name)
                transition = auto_play(snapshot, self.rng)
                if transition.state is snapshot:
                    transition = Transition(state=snapshot)
            await self._commit(transition)

    # --- Bots ---

    def _schedule_bot(self) -> None:
        current = self.snapshot.current_player
        if (
            self.snapshot.state != GameState.PLAYING
            or current is None
            or current.id not in self.bots
            or self._bot_task is not None
        ):
            return
        self._bot_task = asyncio.create_task(
            self._run_bot_turn(current.id, self.snapshot.round_number)
        )

    async def _run_bot_turn(self, bot_id: str, round_number: int) -> None:
        await asyncio.sleep(self.config.bot_turn_delay)
        async with self._lock:
            self._bot_task = None
            current = self.snapshot.current_player
            if (
                self.snapshot.state != GameState.PLAYING
                or self.snapshot.round_number != round_number
                or current is None
                or current.id != bot_id
            ):
                return
            transition = self.bots[bot_id].take_turn(self.snapshot, self.rng)
            logger.info("Game %s: bot %s played (%s)", self.game_id, current.name, transition.notice)
            await self._commit(transition)

    # --- Rounds ---

    async def _run_next_round_later(self) -> None:
        await asyncio.sleep(self.config.round_over_delay)
        self._round_task = None
        await self.next_round()

    # --- Replication ---

    async def _commit(self, transition: Transition) -> None:
        """Adopt a transition's state and broadcast if anything changed.

        Must be called with the lock held.
        """
        changed = transition.state is not self.snapshot
        if not changed and not transition.blocking:
            return

        self.snapshot = transition.state
        self._notice = transition.notice if (transition.accepted or transition.blocking) else None
        await self._broadcast()

        state = self.snapshot.state
        if state == GameState.GAME_OVER:
            logger.info("Game %s over: %s", self.game_id, self.snapshot.leaderboard())
            await self.timer.stop()
        elif state == GameState.ROUND_OVER:
            if self.config.round_over_delay > 0 and self._round_task is None:
                self._round_task = asyncio.create_task(self._run_next_round_later())
        elif not transition.blocking:
            self._schedule_bot()

    async def _broadcast(self) -> None:
        message = state_update(self.snapshot, list(self.lobby.values()), self._notice)
        logger.debug("Game %s: broadcasting %s", self.game_id, self.snapshot)
        await self.manager.broadcast_to_game(message, self.game_id)
