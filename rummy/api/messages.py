"""Wire messages between participants and the host.

Each direction is a closed union discriminated on ``type``:

- client -> host: ``JOIN`` (sent once on connect) and ``ACTION``
- host -> client: ``STATE_UPDATE`` (the full read-facing state)

Action payloads are themselves discriminated on ``action``. Field names are
camelCase on the wire.
"""

import json
import logging
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from rummy.models.enums import (
    CardColor,
    CardKind,
    GameState,
    Notice,
    RequirementKind,
    TurnPhase,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ActionMessage",
    "ActionPayload",
    "CardPayload",
    "ClientMessage",
    "DiscardPayload",
    "DrawPayload",
    "HitPayload",
    "HostMessage",
    "JoinMessage",
    "JoinPayload",
    "MeldPayload",
    "MeldActionPayload",
    "PhasePayload",
    "PlayerPayload",
    "ReorderPayload",
    "RequirementPayload",
    "StatePayload",
    "StateUpdateMessage",
    "WireModel",
    "parse_client_message",
    "parse_host_message",
]


class WireModel(BaseModel):
    """Base for every wire model: camelCase aliases, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> str:
        """Serialize to the JSON text sent over the socket."""
        return self.model_dump_json(by_alias=True)


# --- State ---


class CardPayload(WireModel):
    """Card as seen on the wire."""

    id: str
    kind: CardKind
    color: CardColor
    value: int


class MeldPayload(WireModel):
    """Meld on the table."""

    id: str
    cards: list[CardPayload]
    kind: RequirementKind
    owner_id: str


class PlayerPayload(WireModel):
    """Player, including hand and melds."""

    id: str
    name: str
    is_human: bool = True
    hand: list[CardPayload] = Field(default_factory=list)
    melds: list[MeldPayload] = Field(default_factory=list)
    phase_index: int = 0
    has_laid_down: bool = False
    score: int = 0
    is_skipped: bool = False


class RequirementPayload(WireModel):
    """One requirement of a phase."""

    kind: RequirementKind
    count: int = Field(gt=0)


class PhasePayload(WireModel):
    """Phase definition."""

    id: int
    name: str
    description: str = ""
    requirements: list[RequirementPayload] = Field(min_length=1, max_length=2)


class StatePayload(WireModel):
    """Everything a participant may see. Undrawn cards are reduced to a count."""

    players: list[PlayerPayload]
    deck_size: int
    discard_pile: list[CardPayload]
    current_player_index: int
    turn_phase: TurnPhase
    game_state: GameState
    phases: list[PhasePayload]
    round_winner_id: str | None = None
    time_left: int
    turn_duration: int
    round_number: int = 0
    lobby: list[str] = Field(default_factory=list)
    notice: Notice | None = None


# --- Client -> host ---


class JoinPayload(WireModel):
    """Participant introduction."""

    name: str = Field(min_length=1, max_length=40)
    player_id: str = Field(min_length=1, max_length=64)


class DrawPayload(WireModel):
    """Draw from the deck, or the discard pile when from_discard is set."""

    action: Literal["DRAW"] = "DRAW"
    player_id: str
    from_discard: bool = False


class DiscardPayload(WireModel):
    """Discard one card and end the turn."""

    action: Literal["DISCARD"] = "DISCARD"
    player_id: str
    card_id: str


class MeldActionPayload(WireModel):
    """Lay down the current phase from the selected cards."""

    action: Literal["MELD"] = "MELD"
    player_id: str
    card_ids: list[str]


class HitPayload(WireModel):
    """Add one card from hand to a meld on the table."""

    action: Literal["HIT"] = "HIT"
    player_id: str
    card_id: str
    meld_id: str


class ReorderPayload(WireModel):
    """Move a card within the sender's own hand."""

    action: Literal["REORDER"] = "REORDER"
    player_id: str
    from_index: int
    to_index: int


ActionPayload = Annotated[
    DrawPayload | DiscardPayload | MeldActionPayload | HitPayload | ReorderPayload,
    Field(discriminator="action"),
]


class JoinMessage(WireModel):
    """Sent once by a participant right after connecting."""

    type: Literal["JOIN"] = "JOIN"
    payload: JoinPayload


class ActionMessage(WireModel):
    """A participant's intent, routed to the host."""

    type: Literal["ACTION"] = "ACTION"
    payload: ActionPayload


# --- Host -> client ---


class StateUpdateMessage(WireModel):
    """Full state broadcast; replaces every mirror wholesale."""

    type: Literal["STATE_UPDATE"] = "STATE_UPDATE"
    payload: StatePayload


ClientMessage = Annotated[JoinMessage | ActionMessage, Field(discriminator="type")]
HostMessage = StateUpdateMessage

_client_adapter: TypeAdapter[JoinMessage | ActionMessage] = TypeAdapter(ClientMessage)
_host_adapter: TypeAdapter[StateUpdateMessage] = TypeAdapter(StateUpdateMessage)


def _decode(raw: str | bytes | dict) -> dict | None:
    if isinstance(raw, dict):
        return raw
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Dropping malformed message: %s", e)
        return None
    if not isinstance(data, dict):
        logger.warning("Dropping message that is not an object: %r", data)
        return None
    return data


def parse_client_message(raw: str | bytes | dict) -> JoinMessage | ActionMessage | None:
    """Parse a message sent to the host.

    Returns:
        The typed message, or None for unknown tags and malformed bodies

    """
    data = _decode(raw)
    if data is None:
        return None
    try:
        return _client_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning("Rejected client message (type=%r): %s", data.get("type"), e.errors()[:1])
        return None


def parse_host_message(raw: str | bytes | dict) -> StateUpdateMessage | None:
    """Parse a message sent by the host.

    Returns:
        The typed message, or None for unknown tags and malformed bodies

    """
    data = _decode(raw)
    if data is None:
        return None
    try:
        return _host_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning("Rejected host message (type=%r): %s", data.get("type"), e.errors()[:1])
        return None
