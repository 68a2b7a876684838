"""Tests for the authoritative host controller."""

import asyncio
import random
from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock

import pytest

from rummy.api.game_handler import HostController
from rummy.api.messages import ActionMessage, DrawPayload, JoinMessage, JoinPayload
from rummy.config import Settings
from rummy.constants import BOT_NAMES
from rummy.models.actions import Discard, Draw
from rummy.models.card import number_card
from rummy.models.enums import CardColor, GameState, Notice, TurnPhase
from rummy.models.phase import STANDARD_PHASES
from rummy.models.turn import pick_discard

pytestmark = pytest.mark.anyio


@pytest.fixture
def mock_manager():
    """Create a mock connection manager."""
    manager = MagicMock()
    manager.broadcast_to_game = AsyncMock()
    return manager


def make_host(manager, **overrides) -> HostController:
    """Host with a quiet timer and instant bots unless overridden."""
    config = Settings(**{"turn_duration": 0, "bot_turn_delay": 0, "table_size": 2, **overrides})
    return HostController(
        manager, "game-1", "host", "Ann", rng=random.Random(5), config=config, tick_interval=100
    )


def last_broadcast(manager):
    """Payload of the most recent broadcast."""
    return manager.broadcast_to_game.call_args[0][0].payload


async def wait_for(predicate, attempts: int = 200) -> None:
    """Let background tasks run until predicate holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not reached")


class TestLobby:
    """Tests for joining and leaving before the game starts."""

    async def test_host_is_seated_first(self, mock_manager):
        """The host is in the lobby from the start, marked as host."""
        host = make_host(mock_manager)
        assert host.view.lobby == ("Ann (Host)",)
        assert host.local_player_id == "host"

    async def test_join_broadcasts(self, mock_manager):
        """Joining adds the name and tells everyone."""
        host = make_host(mock_manager)
        assert await host.join("p-2", "Bob")

        assert host.lobby["p-2"] == "Bob"
        assert last_broadcast(mock_manager).lobby == ["Ann (Host)", "Bob"]
        assert mock_manager.broadcast_to_game.call_args[0][1] == "game-1"

    async def test_table_full(self, mock_manager):
        """No more participants than seats."""
        host = make_host(mock_manager)
        await host.join("p-2", "Bob")

        assert not await host.join("p-3", "Cid")
        assert "p-3" not in host.lobby

    async def test_rejoin_rebroadcasts(self, mock_manager):
        """A known participant joining again just gets the state."""
        host = make_host(mock_manager)
        await host.join("p-2", "Bob")
        calls = mock_manager.broadcast_to_game.call_count

        assert await host.join("p-2", "Bob")
        assert mock_manager.broadcast_to_game.call_count == calls + 1
        assert len(host.lobby) == 2

    async def test_leave(self, mock_manager):
        """Leaving the lobby frees the seat; the host never leaves."""
        host = make_host(mock_manager)
        await host.join("p-2", "Bob")
        await host.leave("p-2")
        await host.leave("host")

        assert list(host.lobby) == ["host"]

    async def test_join_message(self, mock_manager):
        """JOIN messages go through join."""
        host = make_host(mock_manager)
        await host.handle_message("p-2", JoinMessage(payload=JoinPayload(name="Bob", player_id="p-2")))
        assert host.lobby["p-2"] == "Bob"


class TestStart:
    """Tests for starting the game."""

    async def test_start_fills_seats_with_bots(self, mock_manager):
        """Empty seats get bots and the first round is dealt."""
        host = make_host(mock_manager, table_size=4)
        assert await host.start()

        players = host.snapshot.players
        assert host.snapshot.state == GameState.PLAYING
        assert [p.id for p in players] == ["host", "bot-0", "bot-1", "bot-2"]
        assert players[0].is_human
        assert all(p.name in BOT_NAMES for p in players[1:])
        assert set(host.bots) == {"bot-0", "bot-1", "bot-2"}
        assert last_broadcast(mock_manager).game_state == GameState.PLAYING

    async def test_start_twice(self, mock_manager):
        """A started game can't be started again."""
        host = make_host(mock_manager)
        await host.start()
        assert not await host.start()

    async def test_join_after_start(self, mock_manager):
        """Late joiners are turned away."""
        host = make_host(mock_manager, table_size=4)
        await host.start()
        assert not await host.join("p-9", "Late")

    async def test_theme_fallback_notice(self, mock_manager):
        """A theme the provider can't serve falls back with a notice."""
        host = make_host(mock_manager)
        host.theme = "pirates"
        await host.start()

        assert last_broadcast(mock_manager).notice == Notice.PROVIDER_FALLBACK
        assert host.view.notice == Notice.PROVIDER_FALLBACK

    async def test_failing_provider_still_starts(self, mock_manager):
        """A provider error never keeps the table in the lobby."""
        host = make_host(mock_manager)
        host.theme = "pirates"
        host.provider = MagicMock()
        host.provider.generate = AsyncMock(side_effect=RuntimeError("provider down"))

        assert await host.start()
        assert host.snapshot.state == GameState.PLAYING
        assert host.snapshot.phases == STANDARD_PHASES
        assert host.view.notice == Notice.PROVIDER_FALLBACK

    async def test_timer_runs_when_enabled(self, mock_manager):
        """A positive turn duration starts the countdown."""
        host = make_host(mock_manager, turn_duration=30)
        await host.start()

        assert host.timer.is_running
        await host.close()
        assert not host.timer.is_running


class TestActions:
    """Tests for applying and replicating intents."""

    async def test_accepted_action_broadcasts(self, mock_manager):
        """A legal draw changes state and is broadcast."""
        host = make_host(mock_manager)
        await host.start()
        calls = mock_manager.broadcast_to_game.call_count

        transition = await host.submit(Draw("host"))

        assert transition.accepted
        assert host.snapshot.turn_phase == TurnPhase.ACTION
        assert mock_manager.broadcast_to_game.call_count == calls + 1
        assert last_broadcast(mock_manager).turn_phase == TurnPhase.ACTION

    async def test_rejected_action_is_silent(self, mock_manager):
        """Illegal intents change nothing and are not broadcast."""
        host = make_host(mock_manager)
        await host.start()
        before = host.snapshot
        calls = mock_manager.broadcast_to_game.call_count

        transition = await host.submit(Discard("host", "card-0"))

        assert transition.notice == Notice.WRONG_TURN_PHASE
        assert host.snapshot is before
        assert mock_manager.broadcast_to_game.call_count == calls

    async def test_action_for_someone_else_dropped(self, mock_manager):
        """A connection may only act for its own player."""
        host = make_host(mock_manager)
        await host.start()
        before = host.snapshot

        await host.handle_message("p-2", ActionMessage(payload=DrawPayload(player_id="host")))
        assert host.snapshot is before

    async def test_action_message(self, mock_manager):
        """ACTION messages are applied for their sender."""
        host = make_host(mock_manager)
        await host.start()

        await host.handle_message("host", ActionMessage(payload=DrawPayload(player_id="host")))
        assert host.snapshot.turn_phase == TurnPhase.ACTION

    async def test_stalemate_is_broadcast(self, mock_manager):
        """A blocking rejection reaches everyone with the state unchanged."""
        host = make_host(mock_manager)
        await host.start()
        host.snapshot = replace(host.snapshot, deck=(), discard=host.snapshot.discard[-1:])
        before = host.snapshot
        calls = mock_manager.broadcast_to_game.call_count

        transition = await host.submit(Draw("host"))

        assert transition.blocking
        assert host.snapshot is before
        assert mock_manager.broadcast_to_game.call_count == calls + 1
        assert last_broadcast(mock_manager).notice == Notice.STALEMATE

    async def test_bots_play_until_human_turn(self, mock_manager):
        """After the host discards, bots play and hand the turn back."""
        host = make_host(mock_manager, table_size=3)
        await host.start()
        await host.submit(Draw("host"))
        card = pick_discard(host.snapshot.players[0].hand)
        await host.submit(Discard("host", card.id))

        await wait_for(
            lambda: host.snapshot.current_player_index == 0
            and host.snapshot.turn_phase == TurnPhase.DRAW
        )
        assert host.snapshot.deck_size < 108 - 31
        await host.close()


class TestRounds:
    """Tests for round end and the next deal."""

    async def _win_round(self, host: HostController) -> None:
        await host.start()
        players = list(host.snapshot.players)
        players[0] = replace(players[0], hand=(number_card("last", CardColor.RED, 4),))
        host.snapshot = replace(
            host.snapshot, players=tuple(players), turn_phase=TurnPhase.ACTION
        )
        await host.submit(Discard("host", "last"))

    async def test_round_over_waits_for_host(self, mock_manager):
        """Without a delay the next round waits for next_round."""
        host = make_host(mock_manager)
        await self._win_round(host)

        assert host.snapshot.state == GameState.ROUND_OVER
        assert last_broadcast(mock_manager).round_winner_id == "host"
        assert last_broadcast(mock_manager).notice == Notice.ROUND_WON

        assert await host.next_round()
        assert host.snapshot.state == GameState.PLAYING
        assert host.snapshot.round_number == 2

    async def test_next_round_only_when_over(self, mock_manager):
        """next_round does nothing mid-round."""
        host = make_host(mock_manager)
        await host.start()
        assert not await host.next_round()

    async def test_round_over_delay(self, mock_manager):
        """With a delay the next round is dealt automatically."""
        host = make_host(mock_manager, round_over_delay=0.01)
        await self._win_round(host)

        await wait_for(lambda: host.snapshot.round_number == 2)
        assert host.snapshot.state == GameState.PLAYING
        await host.close()


class TestCountdown:
    """Tests for the turn timer."""

    async def test_tick_counts_down_and_broadcasts(self, mock_manager):
        """Each tick lowers time_left and is replicated."""
        host = make_host(mock_manager, turn_duration=3)
        await host.start()
        await host.on_tick()

        assert host.snapshot.time_left == 2
        assert last_broadcast(mock_manager).time_left == 2
        await host.close()

    async def test_timeout_auto_plays_human(self, mock_manager):
        """A human whose time runs out draws automatically."""
        host = make_host(mock_manager, turn_duration=2)
        await host.start()
        await host.on_tick()
        await host.on_tick()

        assert host.snapshot.turn_phase == TurnPhase.ACTION
        assert host.snapshot.time_left == 2
        assert last_broadcast(mock_manager).notice == Notice.TIMEOUT_AUTO_PLAY
        await host.close()

    async def test_tick_without_countdown(self, mock_manager):
        """Disabled countdowns never broadcast."""
        host = make_host(mock_manager)
        await host.start()
        calls = mock_manager.broadcast_to_game.call_count

        await host.on_tick()
        assert mock_manager.broadcast_to_game.call_count == calls
