"""Player intents the turn state machine can apply."""

from dataclasses import dataclass

from rummy.models.enums import ActionType


@dataclass(frozen=True)
class Draw:
    """Draw from the deck, or from the discard pile."""

    player_id: str
    from_discard: bool = False

    type = ActionType.DRAW


@dataclass(frozen=True)
class Discard:
    """Discard one card from hand, ending the turn."""

    player_id: str
    card_id: str

    type = ActionType.DISCARD


@dataclass(frozen=True)
class MeldCards:
    """Lay down the current phase from the selected cards."""

    player_id: str
    card_ids: tuple[str, ...]

    type = ActionType.MELD


@dataclass(frozen=True)
class Hit:
    """Append one card from hand to a meld on the table."""

    player_id: str
    card_id: str
    meld_id: str

    type = ActionType.HIT


@dataclass(frozen=True)
class Reorder:
    """Move one card within the player's own hand."""

    player_id: str
    from_index: int
    to_index: int

    type = ActionType.REORDER


Action = Draw | Discard | MeldCards | Hit | Reorder
