"""Enums and constants for the game."""

from enum import Enum, StrEnum


class CardKind(str, Enum):
    """Kinds of cards in the deck."""

    NUMBER = "NUMBER"
    WILD = "WILD"
    SKIP = "SKIP"


class CardColor(str, Enum):
    """Card colors. WILD and SKIP are sentinel colors for special cards."""

    RED = "RED"
    BLUE = "BLUE"
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    WILD = "WILD"
    SKIP = "SKIP"


PLAYABLE_COLORS = (CardColor.RED, CardColor.BLUE, CardColor.GREEN, CardColor.YELLOW)


class RequirementKind(str, Enum):
    """Requirement kinds a phase can ask for."""

    SET = "SET"  # n cards of the same value
    RUN = "RUN"  # n cards in sequence
    COLOR = "COLOR"  # n cards of the same color


class GameState(str, Enum):
    """Coarse game states during the lifecycle."""

    LOBBY = "LOBBY"
    PLAYING = "PLAYING"
    ROUND_OVER = "ROUND_OVER"
    GAME_OVER = "GAME_OVER"


class TurnPhase(str, Enum):
    """Sub-phases of a single turn."""

    DRAW = "DRAW"
    ACTION = "ACTION"  # meld, hit or discard
    DISCARD = "DISCARD"


class ActionType(str, Enum):
    """Actions a participant can ask the host to perform."""

    DRAW = "DRAW"
    DISCARD = "DISCARD"
    MELD = "MELD"
    HIT = "HIT"
    REORDER = "REORDER"


class Notice(StrEnum):
    """Notice codes for i18n translation on the frontend."""

    # Turn errors
    NOT_PLAYING = "notice.notPlaying"
    NOT_YOUR_TURN = "notice.notYourTurn"
    WRONG_TURN_PHASE = "notice.wrongTurnPhase"
    PLAYER_NOT_FOUND = "notice.playerNotFound"

    # Card errors
    CARD_NOT_IN_HAND = "notice.cardNotInHand"
    CANNOT_DRAW_SKIP = "notice.cannotDrawSkip"
    DISCARD_EMPTY = "notice.discardEmpty"
    INVALID_REORDER = "notice.invalidReorder"

    # Meld errors
    ALREADY_LAID_DOWN = "notice.alreadyLaidDown"
    MUST_LAY_DOWN_FIRST = "notice.mustLayDownFirst"
    INVALID_MELD = "notice.invalidMeld"
    SELECTION_TOO_LARGE = "notice.selectionTooLarge"
    MELD_NOT_FOUND = "notice.meldNotFound"
    CARD_DOES_NOT_FIT = "notice.cardDoesNotFit"

    # Resource exhaustion
    STALEMATE = "notice.stalemate"

    # Informational
    PHASE_COMPLETED = "notice.phaseCompleted"
    CARD_ADDED = "notice.cardAdded"
    PLAYER_SKIPPED = "notice.playerSkipped"
    TIMEOUT_AUTO_PLAY = "notice.timeoutAutoPlay"
    ROUND_WON = "notice.roundWon"
    GAME_OVER = "notice.gameOver"

    # Collaborators
    PROVIDER_FALLBACK = "notice.providerFallback"
    CONNECTION_LOST = "notice.connectionLost"


# Rejections that leave the round unable to progress; the host broadcasts these.
BLOCKING_NOTICES = frozenset({Notice.STALEMATE})
