"""Phase definitions."""

from dataclasses import dataclass

from rummy.constants import MAX_MELD_SELECTION
from rummy.models.enums import RequirementKind

PHASE_COUNT = 10
MAX_REQUIREMENTS = 2


@dataclass(frozen=True)
class PhaseRequirement:
    """One group a player must lay down: a kind and a minimum card count."""

    kind: RequirementKind
    count: int


@dataclass(frozen=True)
class Phase:
    """An ordinal goal of one or two requirements laid down together.

    Attributes:
        id: 1-based ordinal
        name: Display name
        description: Short description like "2 Sets of 3"
        requirements: One or two requirement groups

    """

    id: int
    name: str
    description: str
    requirements: tuple[PhaseRequirement, ...]

    @property
    def total_count(self) -> int:
        """Total number of cards the requirements ask for."""
        return sum(req.count for req in self.requirements)


def _phase(ordinal: int, description: str, *requirements: tuple[RequirementKind, int]) -> Phase:
    return Phase(
        id=ordinal,
        name=f"Phase {ordinal}",
        description=description,
        requirements=tuple(PhaseRequirement(kind, count) for kind, count in requirements),
    )


SET = RequirementKind.SET
RUN = RequirementKind.RUN
COLOR = RequirementKind.COLOR

STANDARD_PHASES: tuple[Phase, ...] = (
    _phase(1, "2 Sets of 3", (SET, 3), (SET, 3)),
    _phase(2, "1 Set of 3 + 1 Run of 4", (SET, 3), (RUN, 4)),
    _phase(3, "1 Set of 4 + 1 Run of 4", (SET, 4), (RUN, 4)),
    _phase(4, "1 Run of 7", (RUN, 7)),
    _phase(5, "1 Run of 8", (RUN, 8)),
    _phase(6, "1 Run of 9", (RUN, 9)),
    _phase(7, "2 Sets of 4", (SET, 4), (SET, 4)),
    _phase(8, "7 Cards of One Color", (COLOR, 7)),
    _phase(9, "1 Set of 5 + 1 Set of 2", (SET, 5), (SET, 2)),
    _phase(10, "1 Set of 5 + 1 Set of 3", (SET, 5), (SET, 3)),
)


def is_well_formed_phase_list(phases: list[Phase] | tuple[Phase, ...]) -> bool:
    """Check a phase list has the same structural shape as the standard list.

    Ten phases, each with one or two requirements of positive count that
    fit in a single meld selection.
    """
    if len(phases) != PHASE_COUNT:
        return False
    return all(
        1 <= len(phase.requirements) <= MAX_REQUIREMENTS
        and all(req.count > 0 for req in phase.requirements)
        and phase.total_count <= MAX_MELD_SELECTION
        for phase in phases
    )
