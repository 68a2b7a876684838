"""Conversion between domain models and wire payloads.

Host side: ``GameSnapshot`` -> ``StatePayload`` (deck contents dropped).
Mirror side: ``StatePayload`` -> ``GameView``.
Both sides: domain actions <-> action payloads.
"""

from rummy.api.messages import (
    ActionMessage,
    CardPayload,
    DiscardPayload,
    DrawPayload,
    HitPayload,
    MeldActionPayload,
    MeldPayload,
    PhasePayload,
    PlayerPayload,
    ReorderPayload,
    RequirementPayload,
    StatePayload,
    StateUpdateMessage,
)
from rummy.models.actions import Action, Discard, Draw, Hit, MeldCards, Reorder
from rummy.models.card import Card
from rummy.models.enums import Notice
from rummy.models.game import GameSnapshot, GameView
from rummy.models.meld import Meld
from rummy.models.phase import Phase, PhaseRequirement
from rummy.models.player import Player


def serialize_card(card: Card) -> CardPayload:
    """Serialize a Card."""
    return CardPayload(id=card.id, kind=card.kind, color=card.color, value=card.value)


def deserialize_card(data: CardPayload) -> Card:
    """Deserialize a Card."""
    return Card(id=data.id, kind=data.kind, color=data.color, value=data.value)


def serialize_meld(meld: Meld) -> MeldPayload:
    """Serialize a Meld."""
    return MeldPayload(
        id=meld.id,
        cards=[serialize_card(c) for c in meld.cards],
        kind=meld.kind,
        owner_id=meld.owner_id,
    )


def deserialize_meld(data: MeldPayload) -> Meld:
    """Deserialize a Meld."""
    return Meld(
        id=data.id,
        cards=tuple(deserialize_card(c) for c in data.cards),
        kind=data.kind,
        owner_id=data.owner_id,
    )


def serialize_player(player: Player) -> PlayerPayload:
    """Serialize a Player, hand included."""
    return PlayerPayload(
        id=player.id,
        name=player.name,
        is_human=player.is_human,
        hand=[serialize_card(c) for c in player.hand],
        melds=[serialize_meld(m) for m in player.melds],
        phase_index=player.phase_index,
        has_laid_down=player.has_laid_down,
        score=player.score,
        is_skipped=player.is_skipped,
    )


def deserialize_player(data: PlayerPayload) -> Player:
    """Deserialize a Player."""
    return Player(
        id=data.id,
        name=data.name,
        is_human=data.is_human,
        hand=tuple(deserialize_card(c) for c in data.hand),
        melds=tuple(deserialize_meld(m) for m in data.melds),
        phase_index=data.phase_index,
        has_laid_down=data.has_laid_down,
        score=data.score,
        is_skipped=data.is_skipped,
    )


def serialize_phase(phase: Phase) -> PhasePayload:
    """Serialize a Phase."""
    return PhasePayload(
        id=phase.id,
        name=phase.name,
        description=phase.description,
        requirements=[RequirementPayload(kind=r.kind, count=r.count) for r in phase.requirements],
    )


def deserialize_phase(data: PhasePayload) -> Phase:
    """Deserialize a Phase."""
    return Phase(
        id=data.id,
        name=data.name,
        description=data.description,
        requirements=tuple(PhaseRequirement(kind=r.kind, count=r.count) for r in data.requirements),
    )


def serialize_state(
    state: GameSnapshot, lobby: list[str] | None = None, notice: Notice | None = None
) -> StatePayload:
    """Build the broadcast payload for a snapshot. The deck is sent as a count only."""
    return StatePayload(
        players=[serialize_player(p) for p in state.players],
        deck_size=state.deck_size,
        discard_pile=[serialize_card(c) for c in state.discard],
        current_player_index=state.current_player_index,
        turn_phase=state.turn_phase,
        game_state=state.state,
        phases=[serialize_phase(p) for p in state.phases],
        round_winner_id=state.round_winner_id,
        time_left=state.time_left,
        turn_duration=state.turn_duration,
        round_number=state.round_number,
        lobby=list(lobby or []),
        notice=notice,
    )


def state_update(
    state: GameSnapshot, lobby: list[str] | None = None, notice: Notice | None = None
) -> StateUpdateMessage:
    """Wrap a snapshot in a STATE_UPDATE message."""
    return StateUpdateMessage(payload=serialize_state(state, lobby, notice))


def deserialize_view(data: StatePayload) -> GameView:
    """Build a mirror's view from a broadcast payload."""
    return GameView(
        players=tuple(deserialize_player(p) for p in data.players),
        phases=tuple(deserialize_phase(p) for p in data.phases),
        deck_size=data.deck_size,
        discard=tuple(deserialize_card(c) for c in data.discard_pile),
        current_player_index=data.current_player_index,
        turn_phase=data.turn_phase,
        state=data.game_state,
        round_number=data.round_number,
        round_winner_id=data.round_winner_id,
        turn_duration=data.turn_duration,
        time_left=data.time_left,
        notice=data.notice,
        lobby=tuple(data.lobby),
    )


def serialize_action(action: Action) -> ActionMessage:
    """Wrap a domain action in an ACTION message."""
    match action:
        case Draw():
            payload = DrawPayload(player_id=action.player_id, from_discard=action.from_discard)
        case Discard():
            payload = DiscardPayload(player_id=action.player_id, card_id=action.card_id)
        case MeldCards():
            payload = MeldActionPayload(player_id=action.player_id, card_ids=list(action.card_ids))
        case Hit():
            payload = HitPayload(
                player_id=action.player_id, card_id=action.card_id, meld_id=action.meld_id
            )
        case Reorder():
            payload = ReorderPayload(
                player_id=action.player_id,
                from_index=action.from_index,
                to_index=action.to_index,
            )
        case _:
            raise TypeError(f"Unknown action: {action!r}")
    return ActionMessage(payload=payload)


def deserialize_action(message: ActionMessage) -> Action:
    """Turn an ACTION message into a domain action."""
    payload = message.payload
    match payload:
        case DrawPayload():
            return Draw(payload.player_id, payload.from_discard)
        case DiscardPayload():
            return Discard(payload.player_id, payload.card_id)
        case MeldActionPayload():
            return MeldCards(payload.player_id, tuple(payload.card_ids))
        case HitPayload():
            return Hit(payload.player_id, payload.card_id, payload.meld_id)
        case ReorderPayload():
            return Reorder(payload.player_id, payload.from_index, payload.to_index)
    raise TypeError(f"Unknown action payload: {payload!r}")
