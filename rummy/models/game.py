"""Game state snapshots.

``GameSnapshot`` is the canonical, host-owned state. ``GameView`` is the
read-facing projection every participant sees: identical except that the
undrawn deck is reduced to its size.
"""

from dataclasses import dataclass, replace
from typing import Any

from rummy.constants import DEFAULT_TURN_DURATION
from rummy.models.card import Card
from rummy.models.enums import BLOCKING_NOTICES, GameState, Notice, TurnPhase
from rummy.models.phase import STANDARD_PHASES, Phase
from rummy.models.player import Player


class TableQueries:
    """Lookups shared by snapshots and views."""

    players: tuple[Player, ...]
    phases: tuple[Phase, ...]
    discard: tuple[Card, ...]
    current_player_index: int

    @property
    def current_player(self) -> Player | None:
        """Get the player whose turn it is."""
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    @property
    def top_discard(self) -> Card | None:
        """Get the top card of the discard pile."""
        return self.discard[-1] if self.discard else None

    @property
    def last_phase_index(self) -> int:
        """Index of the final phase."""
        return len(self.phases) - 1

    def get_player(self, player_id: str) -> Player | None:
        """Get a player by ID."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: str) -> int:
        """Get a player's seat index, or -1 if not seated."""
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return -1

    def phase_for(self, player: Player) -> Phase:
        """Get the phase a player is currently working on."""
        return self.phases[min(player.phase_index, self.last_phase_index)]

    def find_meld(self, meld_id: str) -> tuple[int, int] | None:
        """Locate a meld on the table.

        Returns:
            Tuple of (owner seat index, meld index), or None if not found

        """
        for player_index, player in enumerate(self.players):
            for meld_index, meld in enumerate(player.melds):
                if meld.id == meld_id:
                    return player_index, meld_index
        return None

    def leaderboard(self) -> list[dict[str, Any]]:
        """Get sorted leaderboard: furthest phase first, then lowest score."""
        ranked = sorted(self.players, key=lambda p: (-p.phase_index, p.score))
        return [
            {
                "player_id": p.id,
                "name": p.name,
                "phase": p.phase_index + 1,
                "score": p.score,
                "is_bot": p.is_bot,
            }
            for p in ranked
        ]


@dataclass(frozen=True)
class GameSnapshot(TableQueries):
    """Canonical game state. Only the host holds one and only transitions replace it.

    Attributes:
        players: Players in seat order
        phases: Active list of phases for this game
        deck: Undrawn cards; the top is the last element
        discard: Discard pile; the top is the last element
        current_player_index: Seat of the player whose turn it is
        turn_phase: DRAW, ACTION or DISCARD
        state: Coarse game state
        round_number: 1-based round counter (0 before the first deal)
        round_winner_id: Player who emptied their hand this round
        turn_duration: Seconds per turn, 0 disables the countdown
        time_left: Remaining seconds in the current turn

    """

    players: tuple[Player, ...] = ()
    phases: tuple[Phase, ...] = STANDARD_PHASES
    deck: tuple[Card, ...] = ()
    discard: tuple[Card, ...] = ()
    current_player_index: int = 0
    turn_phase: TurnPhase = TurnPhase.DRAW
    state: GameState = GameState.LOBBY
    round_number: int = 0
    round_winner_id: str | None = None
    turn_duration: int = DEFAULT_TURN_DURATION
    time_left: int = DEFAULT_TURN_DURATION

    @property
    def deck_size(self) -> int:
        """Number of undrawn cards."""
        return len(self.deck)

    def with_player(self, index: int, player: Player) -> "GameSnapshot":
        """Return a copy with the player at a seat replaced."""
        players = list(self.players)
        players[index] = player
        return replace(self, players=tuple(players))

    def all_card_ids(self) -> list[str]:
        """Every card id in deck, discard, hands and melds (for conservation checks)."""
        ids = [c.id for c in self.deck] + [c.id for c in self.discard]
        for player in self.players:
            ids.extend(c.id for c in player.hand)
            for meld in player.melds:
                ids.extend(c.id for c in meld.cards)
        return ids

    def to_view(
        self, lobby: tuple[str, ...] = (), notice: Notice | None = None
    ) -> "GameView":
        """Project to the read-facing view (deck contents hidden)."""
        return GameView(
            players=self.players,
            phases=self.phases,
            deck_size=self.deck_size,
            discard=self.discard,
            current_player_index=self.current_player_index,
            turn_phase=self.turn_phase,
            state=self.state,
            round_number=self.round_number,
            round_winner_id=self.round_winner_id,
            turn_duration=self.turn_duration,
            time_left=self.time_left,
            notice=notice,
            lobby=lobby,
        )

    def __str__(self) -> str:
        """Return string representation."""
        return (
            f"Round {self.round_number}: {len(self.players)} players, "
            f"turn {self.current_player_index} ({self.turn_phase.value}), State: {self.state.value}"
        )


@dataclass(frozen=True)
class GameView(TableQueries):
    """Read-facing game state as seen by any participant."""

    players: tuple[Player, ...] = ()
    phases: tuple[Phase, ...] = STANDARD_PHASES
    deck_size: int = 0
    discard: tuple[Card, ...] = ()
    current_player_index: int = 0
    turn_phase: TurnPhase = TurnPhase.DRAW
    state: GameState = GameState.LOBBY
    round_number: int = 0
    round_winner_id: str | None = None
    turn_duration: int = DEFAULT_TURN_DURATION
    time_left: int = DEFAULT_TURN_DURATION
    notice: Notice | None = None
    lobby: tuple[str, ...] = ()


@dataclass(frozen=True)
class Transition:
    """Result of applying an intent to a snapshot.

    A rejected intent carries the unchanged snapshot and the reason.

    Attributes:
        state: Snapshot after the transition
        accepted: Whether the intent changed the game
        notice: What happened, or why nothing did

    """

    state: GameSnapshot
    accepted: bool = True
    notice: Notice | None = None

    @property
    def blocking(self) -> bool:
        """Whether every participant must be told about this rejection."""
        return not self.accepted and self.notice in BLOCKING_NOTICES
