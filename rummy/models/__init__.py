"""Game domain models."""

from rummy.models.actions import Action, Discard, Draw, Hit, MeldCards, Reorder
from rummy.models.card import Card
from rummy.models.enums import CardColor, CardKind, GameState, Notice, RequirementKind, TurnPhase
from rummy.models.game import GameSnapshot, GameView, Transition
from rummy.models.meld import Meld
from rummy.models.phase import STANDARD_PHASES, Phase, PhaseRequirement
from rummy.models.player import Player

__all__ = [
    "STANDARD_PHASES",
    "Action",
    "Card",
    "CardColor",
    "CardKind",
    "Discard",
    "Draw",
    "GameSnapshot",
    "GameState",
    "GameView",
    "Hit",
    "Meld",
    "MeldCards",
    "Notice",
    "Phase",
    "PhaseRequirement",
    "Player",
    "Reorder",
    "RequirementKind",
    "Transition",
    "TurnPhase",
]
