"""Themed phase lists.

A provider turns a theme string into ten phases shaped like the standard
list, or returns an empty list meaning "use the standard phases". Provider
failures are never fatal: they are logged and degrade to the standard list.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod

import anthropic
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from rummy.config import settings
from rummy.models.enums import RequirementKind
from rummy.models.phase import (
    PHASE_COUNT,
    STANDARD_PHASES,
    Phase,
    PhaseRequirement,
    is_well_formed_phase_list,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 2000

PROMPT_TEMPLATE = """Create a card game progression of {count} phases with a "{theme}" theme.
Mechanics:
- A "SET" is N cards of the same number value.
- A "RUN" is N cards in sequential numerical order.
- A "COLOR" is N cards of the same color.
Each phase has one or two requirements. Make them progressively harder.
Reply with a JSON array only, no prose. Each element looks like:
{{"name": "Creative name", "description": "Short description like '2 Sets of 3'",
  "requirements": [{{"type": "SET", "count": 3}}, {{"type": "SET", "count": 3}}]}}"""

_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


class GeneratedRequirement(BaseModel):
    """Requirement as returned by the model."""

    type: RequirementKind
    count: int = Field(gt=0)


class GeneratedPhase(BaseModel):
    """Phase as returned by the model."""

    name: str
    description: str = ""
    requirements: list[GeneratedRequirement] = Field(min_length=1, max_length=2)


_phase_list_adapter = TypeAdapter(list[GeneratedPhase])


class PhaseProvider(ABC):
    """Source of alternate phase lists."""

    @abstractmethod
    async def generate(self, theme: str) -> list[Phase]:
        """Generate phases for a theme.

        Returns:
            Ten phases, or an empty list to use the standard phases

        """


class StandardPhaseProvider(PhaseProvider):
    """Provider that always defers to the standard phases."""

    async def generate(self, _theme: str) -> list[Phase]:
        """Return no phases."""
        return []


def parse_generated_phases(text: str) -> list[Phase]:
    """Parse a model reply into phases, numbering them from 1.

    Returns:
        Parsed phases, or an empty list if the reply holds no valid JSON array

    """
    match = _JSON_ARRAY.search(text)
    if match is None:
        logger.warning("Phase reply contained no JSON array")
        return []
    try:
        generated = _phase_list_adapter.validate_python(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Could not parse generated phases: %s", e)
        return []

    return [
        Phase(
            id=index + 1,
            name=item.name,
            description=item.description,
            requirements=tuple(PhaseRequirement(r.type, r.count) for r in item.requirements),
        )
        for index, item in enumerate(generated)
    ]


class AnthropicPhaseProvider(PhaseProvider):
    """Provider backed by the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            api_key: API key; defaults to the configured key
            model: Model name; defaults to the configured model
            timeout: Seconds to wait for a reply
            client: Pre-built client (used in tests)

        """
        self.model = model or settings.anthropic_model
        self.timeout = timeout or settings.phase_request_timeout
        api_key = api_key or settings.anthropic_api_key
        if client is None and api_key:
            client = anthropic.AsyncAnthropic(api_key=api_key)
        self._client = client

    def is_available(self) -> bool:
        """Check if the provider has credentials."""
        return self._client is not None

    async def generate(self, theme: str) -> list[Phase]:
        """Ask the model for a themed progression."""
        if self._client is None:
            logger.warning("No Anthropic API key configured, using standard phases")
            return []

        prompt = PROMPT_TEMPLATE.format(count=PHASE_COUNT, theme=theme)
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(
                    model=self.model,
                    max_tokens=DEFAULT_MAX_TOKENS,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=self.timeout,
            )
        except TimeoutError:
            logger.warning("Timed out generating phases for theme %r", theme)
            return []
        except anthropic.APIError as e:
            logger.warning("Failed to generate phases for theme %r: %s", theme, e)
            return []

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )
        return parse_generated_phases(text)


def default_provider() -> PhaseProvider:
    """Anthropic-backed provider when a key is configured, else the standard one."""
    if settings.anthropic_api_key:
        return AnthropicPhaseProvider()
    return StandardPhaseProvider()


async def resolve_phases(provider: PhaseProvider, theme: str | None) -> tuple[tuple[Phase, ...], bool]:
    """Pick the phase list for a new game.

    Returns:
        Tuple of (phases, fell_back); fell_back is True when a theme was
        requested but the standard phases had to be used

    """
    if not theme or not theme.strip():
        return STANDARD_PHASES, False

    try:
        phases = await provider.generate(theme.strip())
    except Exception:
        logger.exception("Phase provider failed for theme %r, using standard", theme)
        return STANDARD_PHASES, True

    if not is_well_formed_phase_list(phases):
        if phases:
            logger.warning("Provider returned %d malformed phases, using standard", len(phases))
        return STANDARD_PHASES, True

    logger.info("Using %d phases themed %r", len(phases), theme)
    return tuple(phases), False
