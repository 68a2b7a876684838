"""Meld validation.

Decides whether a selection of cards satisfies a phase's requirements and
whether a single card may be hit onto an existing meld.

Rules:
    1. Wild cards pad any group.
    2. SET: every non-wild card shares one value. Skips count as naturals
       of their fixed value, so they only set with other skips.
    3. COLOR: every non-wild card (number or skip) shares one color. Skips
       carry the SKIP sentinel color, so they only group with other skips.
    4. RUN: non-wild cards are number cards with distinct values whose gaps
       can be filled by the available wilds. All-wild selections are runs.
    5. Every group must hold at least its requirement's count of cards.
    6. Two-requirement phases try every bipartition of the selection and
       accept the first that satisfies both requirements in either order.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from rummy.constants import MAX_MELD_SELECTION
from rummy.models.card import Card
from rummy.models.enums import RequirementKind
from rummy.models.meld import Meld
from rummy.models.phase import PhaseRequirement


@dataclass(frozen=True)
class MeldResult:
    """Outcome of validating a selection against a phase.

    Attributes:
        valid: Whether the selection satisfies every requirement
        groups: One group of cards per requirement, in requirement order

    """

    valid: bool
    groups: list[list[Card]] = field(default_factory=list)


INVALID = MeldResult(valid=False)


def _split_wilds(cards: Sequence[Card]) -> tuple[list[Card], int]:
    naturals = [c for c in cards if not c.is_wild()]
    return naturals, len(cards) - len(naturals)


def is_valid_set(cards: Sequence[Card], required_count: int) -> bool:
    """Check if cards form a set (same value) of at least required_count cards."""
    naturals, wild_count = _split_wilds(cards)
    if naturals and any(c.value != naturals[0].value for c in naturals):
        return False
    return len(naturals) + wild_count >= required_count


def is_valid_color(cards: Sequence[Card], required_count: int) -> bool:
    """Check if cards form a color group of at least required_count cards."""
    naturals, wild_count = _split_wilds(cards)
    if naturals and any(c.color != naturals[0].color for c in naturals):
        return False
    return len(naturals) + wild_count >= required_count


def is_valid_run(cards: Sequence[Card]) -> bool:
    """Check if cards can be arranged into one ascending sequence.

    The group's length is checked by ``satisfies``; this is the structural
    check only.
    """
    naturals, wild_count = _split_wilds(cards)
    if any(not c.is_number() for c in naturals):
        return False
    if not naturals:
        return True

    values = sorted(c.value for c in naturals)
    needed_wilds = 0
    for low, high in zip(values, values[1:], strict=False):
        gap = high - low
        if gap == 0:
            return False  # duplicates can't share a run
        needed_wilds += gap - 1

    return needed_wilds <= wild_count


def satisfies(cards: Sequence[Card], requirement: PhaseRequirement) -> bool:
    """Check a group of cards against a single requirement."""
    if len(cards) < requirement.count:
        return False
    if requirement.kind == RequirementKind.SET:
        return is_valid_set(cards, requirement.count)
    if requirement.kind == RequirementKind.COLOR:
        return is_valid_color(cards, requirement.count)
    if requirement.kind == RequirementKind.RUN:
        return is_valid_run(cards)
    return False


def validate_phase_hand(
    cards: Sequence[Card],
    requirements: Sequence[PhaseRequirement],
    max_selection: int = MAX_MELD_SELECTION,
) -> MeldResult:
    """Partition a selection so that it satisfies every requirement of a phase.

    Args:
        cards: Selected cards, in selection order
        requirements: One or two requirements of the phase
        max_selection: Largest selection that will be searched

    Returns:
        MeldResult; for two requirements, the first valid bipartition in
        enumeration order (subset masks ascending, requirement order tried
        before the swapped order)

    """
    cards = list(cards)
    if not cards or len(cards) > max_selection:
        return INVALID

    if len(requirements) == 1:
        if satisfies(cards, requirements[0]):
            return MeldResult(valid=True, groups=[cards])
        return INVALID

    if len(requirements) == 2:
        first, second = requirements
        n = len(cards)
        for mask in range(1, (1 << n) - 1):
            group1 = [cards[j] for j in range(n) if (mask >> j) & 1]
            group2 = [cards[j] for j in range(n) if not (mask >> j) & 1]

            if satisfies(group1, first) and satisfies(group2, second):
                return MeldResult(valid=True, groups=[group1, group2])
            if satisfies(group2, first) and satisfies(group1, second):
                return MeldResult(valid=True, groups=[group2, group1])

    return INVALID


def can_add_to_meld(card: Card, meld: Meld) -> bool:
    """Check if a card can be hit onto a meld.

    The whole resulting group is re-validated under the meld's kind at the
    meld's current size. Skips never join a meld.
    """
    if card.is_skip():
        return False
    grown = [*meld.cards, card]
    return satisfies(grown, PhaseRequirement(meld.kind, len(meld.cards)))
