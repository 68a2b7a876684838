"""End-to-end tests: a host and a remote mirror playing through one table.

The mirror's frames are delivered straight to the host, and the host's
broadcasts straight back to the mirror, as text over a loopback.
"""

import asyncio
import random
from dataclasses import replace

import pytest

from rummy.api.game_handler import HostController
from rummy.api.messages import WireModel, parse_client_message
from rummy.api.mirror import MirrorController
from rummy.config import Settings
from rummy.models.card import number_card
from rummy.models.enums import CardColor, GameState, Notice, TurnPhase
from rummy.models.turn import pick_discard

pytestmark = pytest.mark.anyio


class LoopbackManager:
    """Connection manager that delivers broadcasts to in-process mirrors."""

    def __init__(self) -> None:
        self.mirrors: list[MirrorController] = []
        self.broadcasts = 0

    async def broadcast_to_game(self, message: WireModel, _game_id: str) -> None:
        self.broadcasts += 1
        text = message.to_wire()
        for mirror in self.mirrors:
            mirror.receive(text)


async def connect_mirror(host: HostController, manager: LoopbackManager, player_id: str, name: str):
    """Create a mirror whose frames reach the host."""

    async def send(text: str) -> None:
        message = parse_client_message(text)
        assert message is not None
        await host.handle_message(player_id, message)

    mirror = MirrorController(player_id, name, send)
    manager.mirrors.append(mirror)
    await mirror.join()
    return mirror


@pytest.fixture
def manager():
    """Loopback transport."""
    return LoopbackManager()


@pytest.fixture
async def table(manager):
    """Host with one remote participant and no bots."""
    config = Settings(turn_duration=0, bot_turn_delay=0, table_size=2)
    host = HostController(manager, "e2e", "host", "Ann", rng=random.Random(21), config=config)
    mirror = await connect_mirror(host, manager, "p-2", "Bob")
    yield host, mirror
    await host.close()


def n(card_id: str, value: int, color: CardColor = CardColor.RED):
    """Number card."""
    return number_card(card_id, color, value)


class TestReplicatedGame:
    """Host and mirror stay in lockstep."""

    async def test_lobby_replicated(self, table):
        """The mirror sees the lobby as soon as it joins."""
        host, mirror = table
        assert mirror.view.lobby == ("Ann (Host)", "Bob")
        assert mirror.view == host.view

    async def test_turns_alternate(self, table):
        """Both participants play turns through their controllers."""
        host, mirror = table
        await host.start()
        assert mirror.view == host.view
        assert host.is_my_turn and not mirror.is_my_turn

        await host.draw()
        await host.discard(pick_discard(host.local_player.hand).id)
        assert mirror.is_my_turn

        await mirror.draw()
        await mirror.discard(pick_discard(mirror.local_player.hand).id)

        assert host.is_my_turn
        assert mirror.view == host.view
        assert len(mirror.local_player.hand) == 10
        assert host.snapshot.deck_size == 108 - 21 - 2

    async def test_mirror_rejections_change_nothing(self, table, manager):
        """Illegal intents from the mirror are dropped without a broadcast."""
        host, mirror = table
        await host.start()
        before, broadcasts = host.snapshot, manager.broadcasts

        await mirror.draw()
        await mirror.discard(mirror.local_player.hand[0].id)

        assert host.snapshot is before
        assert manager.broadcasts == broadcasts

    async def test_sort_hand_replicates(self, table):
        """A mirror's sort is applied by the host and comes back sorted."""
        host, mirror = table
        await host.start()
        await mirror.sort_hand()

        hand = mirror.local_player.hand
        keys = [(c.color.value, c.value) for c in hand]
        assert keys == sorted(keys)
        assert host.snapshot.players[1].hand == hand

    async def test_mirror_wins_round(self, table):
        """Meld, hit and discard empty the mirror's hand and end the round."""
        host, mirror = table
        await host.start()

        fives = [n("f1", 5), n("f2", 5, CardColor.BLUE), n("f3", 5, CardColor.GREEN)]
        eights = [n("e1", 8), n("e2", 8, CardColor.BLUE), n("e3", 8, CardColor.YELLOW)]
        spare = n("f4", 5, CardColor.YELLOW)
        snapshot = host.snapshot
        bob = replace(snapshot.players[1], hand=(*fives, *eights, spare))
        host.snapshot = replace(
            snapshot.with_player(1, bob),
            current_player_index=1,
            deck=(*snapshot.deck, n("top", 2)),
        )

        await mirror.draw()
        await mirror.meld([c.id for c in (*fives, *eights)])
        assert mirror.view.notice == Notice.PHASE_COMPLETED
        meld_id = mirror.local_player.melds[0].id

        await mirror.hit("f4", meld_id)
        assert mirror.view.notice == Notice.CARD_ADDED
        await mirror.discard("top")

        view = mirror.view
        assert view.state == GameState.ROUND_OVER
        assert view.round_winner_id == "p-2"
        assert view.notice == Notice.ROUND_WON
        bob = mirror.local_player
        assert bob.score == 0
        assert bob.phase_index == 1
        assert host.snapshot.players[0].score > 0

        assert await host.next_round()
        assert mirror.view.round_number == 2
        assert mirror.view.state == GameState.PLAYING
        assert mirror.local_player.phase_index == 1
        assert not mirror.local_player.melds

    async def test_connection_loss_is_local(self, table):
        """A dropped mirror flags its own view; the host carries on."""
        host, mirror = table
        await host.start()
        mirror.connection_lost()

        assert mirror.view.notice == Notice.CONNECTION_LOST
        assert host.view.notice is None


class TestBotTable:
    """A human against bots over the loopback."""

    async def test_bots_answer_every_turn(self, manager):
        """After each human turn the bots play and the turn comes back."""
        config = Settings(turn_duration=0, bot_turn_delay=0, table_size=4)
        host = HostController(manager, "bots", "host", "Ann", rng=random.Random(8), config=config)
        watcher = await connect_mirror(host, manager, "p-2", "Bob")
        await host.start()

        for _ in range(3):
            await host.draw()
            await host.discard(pick_discard(host.local_player.hand).id)
            for _ in range(500):
                if host.snapshot.current_player_index in (0, 1):
                    break
                await asyncio.sleep(0.01)

            current = host.snapshot.current_player
            if current.id == "p-2":
                await watcher.draw()
                await watcher.discard(pick_discard(watcher.local_player.hand).id)
                for _ in range(500):
                    if host.snapshot.current_player_index == 0:
                        break
                    await asyncio.sleep(0.01)

        assert host.snapshot.state == GameState.PLAYING
        assert host.snapshot.turn_phase == TurnPhase.DRAW
        assert watcher.view == host.view
        assert all(len(p.hand) == 10 for p in host.snapshot.players if p.is_human)
        await host.close()
