"""Round and score control: dealing, end-of-round scoring and game end."""

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import replace

from rummy.constants import DEFAULT_TURN_DURATION, HAND_SIZE
from rummy.models.card import Card
from rummy.models.deck import create_deck, deal, shuffle
from rummy.models.enums import GameState, TurnPhase
from rummy.models.game import GameSnapshot
from rummy.models.phase import STANDARD_PHASES, Phase
from rummy.models.player import Player

logger = logging.getLogger(__name__)


def hand_penalty(hand: Iterable[Card]) -> int:
    """Sum the penalty points of the cards left in a hand."""
    return sum(card.score_value for card in hand)


def start_game(
    players: Sequence[Player],
    phases: Sequence[Phase] = STANDARD_PHASES,
    rng: random.Random | None = None,
    hand_size: int = HAND_SIZE,
    turn_duration: int = DEFAULT_TURN_DURATION,
) -> GameSnapshot:
    """Create a snapshot for a fresh game and deal its first round.

    Args:
        players: Seated players, in turn order
        phases: Phase list for this game
        rng: Random source for shuffling
        hand_size: Cards dealt to each player
        turn_duration: Seconds per turn, 0 disables the countdown

    Raises:
        ValueError: If there are no players or not enough cards to deal

    """
    if not players:
        raise ValueError("Cannot start a game without players")

    seated = tuple(replace(p, phase_index=0, score=0) for p in players)
    snapshot = GameSnapshot(
        players=seated,
        phases=tuple(phases),
        turn_duration=turn_duration,
        time_left=turn_duration,
    )
    logger.info("Starting game with %d players: %s", len(seated), [p.name for p in seated])
    return start_round(snapshot, rng, hand_size)


def start_round(
    state: GameSnapshot,
    rng: random.Random | None = None,
    hand_size: int = HAND_SIZE,
) -> GameSnapshot:
    """Shuffle a fresh deck, deal and flip the first discard.

    Each player keeps phase and score; hands are sorted by value, melds
    and per-round flags are cleared. Seat 0 opens the round.
    """
    deck = shuffle(create_deck(), rng)
    hands, remaining = deal(deck, len(state.players), hand_size)
    first_discard = remaining[-1]

    players = tuple(
        player.reset_round(tuple(sorted(hand, key=lambda c: c.value)))
        for player, hand in zip(state.players, hands, strict=True)
    )
    round_number = state.round_number + 1
    logger.debug("Dealt round %d: %d cards left in deck", round_number, len(remaining) - 1)

    return replace(
        state,
        players=players,
        deck=remaining[:-1],
        discard=(first_discard,),
        current_player_index=0,
        turn_phase=TurnPhase.DRAW,
        state=GameState.PLAYING,
        round_number=round_number,
        round_winner_id=None,
        time_left=state.turn_duration,
    )


def end_round(state: GameSnapshot, winner_id: str) -> GameSnapshot:
    """Score the round after a player emptied their hand.

    Every non-winner adds the penalty of their remaining hand. Everyone who
    laid down advances one phase. If a player who laid down now stands on
    the last phase, the game is over.
    """
    last = state.last_phase_index

    players = []
    for player in state.players:
        score = player.score
        if player.id != winner_id:
            score += hand_penalty(player.hand)
        phase_index = player.phase_index
        if player.has_laid_down:
            phase_index = min(phase_index + 1, last)
        players.append(replace(player, score=score, phase_index=phase_index))

    finished = [p for p in players if p.has_laid_down and p.phase_index >= last]

    game_state = GameState.GAME_OVER if finished else GameState.ROUND_OVER
    logger.info(
        "Round %d won by %s; %s",
        state.round_number,
        winner_id,
        "game over" if finished else "round over",
    )
    return replace(
        state,
        players=tuple(players),
        state=game_state,
        round_winner_id=winner_id,
    )


def next_round(
    state: GameSnapshot,
    rng: random.Random | None = None,
    hand_size: int = HAND_SIZE,
) -> GameSnapshot | None:
    """Deal the next round from ROUND_OVER.

    Returns:
        The new snapshot, or None if the game is not between rounds

    """
    if state.state != GameState.ROUND_OVER:
        return None
    return start_round(state, rng, hand_size)

