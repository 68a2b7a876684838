"""Turn state machine.

Every intent is applied as a pure function of the current snapshot:
``apply_action(state, action) -> Transition``. Rejections return the
snapshot unchanged together with a notice explaining why.

Turn flow within PLAYING:
    DRAW -> (draw from deck or discard) -> ACTION
    ACTION -> (meld or hit, any number of times) -> ACTION
    ACTION -> (discard) -> next player's DRAW, or round end on an empty hand

Reorders are allowed for any seated player at any point while PLAYING.
The countdown resets whenever the current player or turn phase changes.
"""

import logging
import random
from collections.abc import Sequence
from dataclasses import replace

from rummy.constants import MAX_MELD_SELECTION
from rummy.models.actions import Action, Discard, Draw, Hit, MeldCards, Reorder
from rummy.models.card import Card
from rummy.models.deck import draw_from_deck
from rummy.models.enums import GameState, Notice, RequirementKind, TurnPhase
from rummy.models.game import GameSnapshot, Transition
from rummy.models.meld import Meld
from rummy.models.round import end_round
from rummy.models.validator import can_add_to_meld, validate_phase_hand

logger = logging.getLogger(__name__)

ACTION_PHASES = (TurnPhase.ACTION, TurnPhase.DISCARD)


def _reject(state: GameSnapshot, notice: Notice) -> Transition:
    return Transition(state=state, accepted=False, notice=notice)


def _seat_for_turn(state: GameSnapshot, player_id: str) -> tuple[int, Notice | None]:
    """Resolve the acting player's seat and check it is their turn."""
    if state.state != GameState.PLAYING:
        return -1, Notice.NOT_PLAYING
    index = state.player_index(player_id)
    if index == -1:
        return -1, Notice.PLAYER_NOT_FOUND
    if index != state.current_player_index:
        return index, Notice.NOT_YOUR_TURN
    return index, None


def _settle(previous: GameSnapshot, transition: Transition) -> Transition:
    """Reset the countdown if the turn holder or turn phase changed."""
    state = transition.state
    if state is previous:
        return transition
    moved = (
        state.current_player_index != previous.current_player_index
        or state.turn_phase != previous.turn_phase
        or state.round_number != previous.round_number
    )
    if moved and state.time_left != state.turn_duration:
        state = replace(state, time_left=state.turn_duration)
        return replace(transition, state=state)
    return transition


def _finish_if_empty(state: GameSnapshot, index: int, notice: Notice) -> Transition:
    """End the round if the player at ``index`` has no cards left."""
    player = state.players[index]
    if player.hand:
        return Transition(state=state, notice=notice)
    finished = end_round(state, player.id)
    if finished.state == GameState.GAME_OVER:
        return Transition(state=finished, notice=Notice.GAME_OVER)
    return Transition(state=finished, notice=Notice.ROUND_WON)


def advance_turn(state: GameSnapshot, skip_next: bool = False) -> GameSnapshot:
    """Pass the turn to the next seat, jumping one player if a skip was played.

    All skip markers are cleared first; the jumped player is then marked.
    """
    players = [replace(p, is_skipped=False) if p.is_skipped else p for p in state.players]
    count = len(players)
    next_index = (state.current_player_index + 1) % count
    if skip_next:
        players[next_index] = replace(players[next_index], is_skipped=True)
        logger.debug("Skipping %s", players[next_index].name)
        next_index = (next_index + 1) % count

    return replace(
        state,
        players=tuple(players),
        current_player_index=next_index,
        turn_phase=TurnPhase.DRAW,
    )


def draw(
    state: GameSnapshot,
    player_id: str,
    from_discard: bool = False,
    rng: random.Random | None = None,
) -> Transition:
    """Draw one card into the current player's hand."""
    index, notice = _seat_for_turn(state, player_id)
    if notice:
        return _reject(state, notice)
    if state.turn_phase != TurnPhase.DRAW:
        return _reject(state, Notice.WRONG_TURN_PHASE)

    player = state.players[index]
    deck, discard = state.deck, state.discard

    if from_discard:
        card = state.top_discard
        if card is None:
            return _reject(state, Notice.DISCARD_EMPTY)
        if card.is_skip():
            return _reject(state, Notice.CANNOT_DRAW_SKIP)
        discard = discard[:-1]
    else:
        supply = draw_from_deck(deck, discard, rng)
        if supply is None:
            logger.warning("Stalemate: deck and discard pile exhausted in round %d", state.round_number)
            return _reject(state, Notice.STALEMATE)
        if supply.recycled:
            logger.info("Recycled discard pile into a %d-card deck", len(supply.deck) + 1)
        card, deck, discard = supply.card, supply.deck, supply.discard

    player = replace(player, hand=(*player.hand, card))
    state = replace(
        state.with_player(index, player),
        deck=deck,
        discard=discard,
        turn_phase=TurnPhase.ACTION,
    )
    return Transition(state=state)


def discard(state: GameSnapshot, player_id: str, card_id: str) -> Transition:
    """Discard a card and pass the turn."""
    index, notice = _seat_for_turn(state, player_id)
    if notice:
        return _reject(state, notice)
    if state.turn_phase not in ACTION_PHASES:
        return _reject(state, Notice.WRONG_TURN_PHASE)

    player = state.players[index]
    card = player.find_card(card_id)
    if card is None:
        return _reject(state, Notice.CARD_NOT_IN_HAND)

    player = replace(player, hand=player.without_cards({card_id}))
    state = replace(state.with_player(index, player), discard=(*state.discard, card))

    if not player.hand:
        return _finish_if_empty(state, index, Notice.ROUND_WON)

    if card.is_skip():
        return Transition(state=advance_turn(state, skip_next=True), notice=Notice.PLAYER_SKIPPED)
    return Transition(state=advance_turn(state))


def lay_down(
    state: GameSnapshot,
    index: int,
    groups: Sequence[tuple[RequirementKind, Sequence[Card]]],
) -> Transition:
    """Move grouped cards from a player's hand onto the table as melds.

    No validation is done here; callers decide whether the groups are legal.
    """
    player = state.players[index]
    taken = {card.id for _, cards in groups for card in cards}
    first = len(player.melds)
    melds = tuple(
        Meld(
            id=f"meld-r{state.round_number}-{player.id}-{first + n}",
            cards=tuple(cards),
            kind=kind,
            owner_id=player.id,
        )
        for n, (kind, cards) in enumerate(groups)
    )
    player = replace(
        player,
        hand=player.without_cards(taken),
        melds=player.melds + melds,
        has_laid_down=True,
    )
    logger.debug("%s laid down %s", player.name, [str(m) for m in melds])
    return _finish_if_empty(state.with_player(index, player), index, Notice.PHASE_COMPLETED)


def meld(
    state: GameSnapshot,
    player_id: str,
    card_ids: Sequence[str],
    max_selection: int = MAX_MELD_SELECTION,
) -> Transition:
    """Lay down the player's current phase from the selected cards."""
    index, notice = _seat_for_turn(state, player_id)
    if notice:
        return _reject(state, notice)
    if state.turn_phase not in ACTION_PHASES:
        return _reject(state, Notice.WRONG_TURN_PHASE)

    player = state.players[index]
    if player.has_laid_down:
        return _reject(state, Notice.ALREADY_LAID_DOWN)

    wanted = set(card_ids)
    if not card_ids or len(wanted) != len(card_ids):
        return _reject(state, Notice.INVALID_MELD)
    if len(card_ids) > max_selection:
        return _reject(state, Notice.SELECTION_TOO_LARGE)

    # Hand order, not click order, so the chosen split is stable.
    selected = [card for card in player.hand if card.id in wanted]
    if len(selected) != len(wanted):
        return _reject(state, Notice.CARD_NOT_IN_HAND)

    phase = state.phase_for(player)
    result = validate_phase_hand(selected, phase.requirements, max_selection)
    if not result.valid:
        return _reject(state, Notice.INVALID_MELD)

    groups = [
        (requirement.kind, cards)
        for requirement, cards in zip(phase.requirements, result.groups, strict=True)
    ]
    logger.info("%s completed phase %d", player.name, phase.id)
    return lay_down(state, index, groups)


def hit(state: GameSnapshot, player_id: str, card_id: str, meld_id: str) -> Transition:
    """Append a card from hand to any meld on the table."""
    index, notice = _seat_for_turn(state, player_id)
    if notice:
        return _reject(state, notice)
    if state.turn_phase not in ACTION_PHASES:
        return _reject(state, Notice.WRONG_TURN_PHASE)

    player = state.players[index]
    if not player.has_laid_down:
        return _reject(state, Notice.MUST_LAY_DOWN_FIRST)

    card = player.find_card(card_id)
    if card is None:
        return _reject(state, Notice.CARD_NOT_IN_HAND)

    location = state.find_meld(meld_id)
    if location is None:
        return _reject(state, Notice.MELD_NOT_FOUND)
    owner_index, meld_index = location
    target = state.players[owner_index].melds[meld_index]
    if not can_add_to_meld(card, target):
        return _reject(state, Notice.CARD_DOES_NOT_FIT)

    state = state.with_player(index, replace(player, hand=player.without_cards({card_id})))
    owner = state.players[owner_index]
    melds = list(owner.melds)
    melds[meld_index] = target.with_card(card)
    state = state.with_player(owner_index, replace(owner, melds=tuple(melds)))
    return _finish_if_empty(state, index, Notice.CARD_ADDED)


def reorder(state: GameSnapshot, player_id: str, from_index: int, to_index: int) -> Transition:
    """Move one card within the requester's own hand."""
    if state.state != GameState.PLAYING:
        return _reject(state, Notice.NOT_PLAYING)
    index = state.player_index(player_id)
    if index == -1:
        return _reject(state, Notice.PLAYER_NOT_FOUND)

    hand = list(state.players[index].hand)
    if not (0 <= from_index < len(hand) and 0 <= to_index < len(hand)):
        return _reject(state, Notice.INVALID_REORDER)
    if from_index == to_index:
        return Transition(state=state)

    hand.insert(to_index, hand.pop(from_index))
    player = replace(state.players[index], hand=tuple(hand))
    return Transition(state=state.with_player(index, player))


def apply_action(
    state: GameSnapshot,
    action: Action,
    rng: random.Random | None = None,
    max_selection: int = MAX_MELD_SELECTION,
) -> Transition:
    """Apply one player intent to the snapshot.

    Args:
        state: Current snapshot
        action: The intent to apply
        rng: Random source, used only when a draw recycles the discard pile
        max_selection: Largest meld selection accepted

    Returns:
        Transition holding the new snapshot, or the unchanged snapshot and a
        rejection notice

    """
    match action:
        case Draw(player_id=player_id, from_discard=from_discard):
            transition = draw(state, player_id, from_discard, rng)
        case Discard(player_id=player_id, card_id=card_id):
            transition = discard(state, player_id, card_id)
        case MeldCards(player_id=player_id, card_ids=card_ids):
            transition = meld(state, player_id, card_ids, max_selection)
        case Hit(player_id=player_id, card_id=card_id, meld_id=meld_id):
            transition = hit(state, player_id, card_id, meld_id)
        case Reorder(player_id=player_id, from_index=from_index, to_index=to_index):
            transition = reorder(state, player_id, from_index, to_index)
        case _:
            logger.warning("Unknown action: %r", action)
            return _reject(state, Notice.NOT_PLAYING)

    if not transition.accepted:
        logger.debug("Rejected %s from %s: %s", action.type.value, action.player_id, transition.notice)
    return _settle(state, transition)


def tick(state: GameSnapshot) -> GameSnapshot:
    """Count the turn timer down by one second (never below zero)."""
    if state.state != GameState.PLAYING or state.turn_duration <= 0 or state.time_left <= 0:
        return state
    return replace(state, time_left=state.time_left - 1)


def timed_out(state: GameSnapshot) -> bool:
    """Check if the current turn's countdown has run out."""
    return state.state == GameState.PLAYING and state.turn_duration > 0 and state.time_left <= 0


def pick_discard(hand: Sequence[Card]) -> Card | None:
    """Pick the highest-value number card, or failing that the highest-value card."""
    if not hand:
        return None
    ranked = sorted(hand, key=lambda c: c.value, reverse=True)
    for card in ranked:
        if card.is_number():
            return card
    return ranked[0]


def auto_play(state: GameSnapshot, rng: random.Random | None = None) -> Transition:
    """Play on behalf of a human whose countdown ran out.

    In DRAW the player draws from the deck; otherwise they discard their
    highest-value card. If neither is possible the countdown is re-armed.
    Bots are driven by their own scheduler and are never auto-played.
    """
    player = state.current_player
    if state.state != GameState.PLAYING or player is None or player.is_bot:
        return _reject(state, Notice.NOT_PLAYING)

    if state.turn_phase == TurnPhase.DRAW:
        transition = apply_action(state, Draw(player.id), rng)
    else:
        card = pick_discard(player.hand)
        if card is None:
            transition = _reject(state, Notice.CARD_NOT_IN_HAND)
        else:
            transition = apply_action(state, Discard(player.id, card.id), rng)

    if not transition.accepted:
        rearmed = replace(state, time_left=state.turn_duration)
        return Transition(state=rearmed, accepted=False, notice=transition.notice)

    logger.info("Auto-played %s turn for %s", state.turn_phase.value, player.name)
    return replace(transition, notice=transition.notice or Notice.TIMEOUT_AUTO_PLAY)


def sort_moves(hand: Sequence[Card]) -> list[tuple[int, int]]:
    """Reorder moves that sort a hand by color, then value.

    Applying the moves in order with ``Reorder`` leaves the hand sorted.
    """
    target = sorted(hand, key=lambda c: (c.color.value, c.value))
    working = list(hand)
    moves = []
    for position, card in enumerate(target):
        current = next(i for i in range(position, len(working)) if working[i] is card)
        if current != position:
            working.insert(position, working.pop(current))
            moves.append((current, position))
    return moves
