"""Value objects shared by the classifier, adapters, dispatcher and synthesizer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IntentCategory(str, Enum):
    """Coarse classification of the reasoning a request needs."""

    DESIGN = "ux-ui"
    LOGIC = "logic"
    MIXED = "mixed"


@dataclass(frozen=True)
class AIRequest:
    """A single dispatch request.

    ``intent`` overrides classification when set.  ``collaborate`` only has
    an effect on MIXED requests.
    """

    prompt: str
    context: dict[str, Any] | None = None
    intent: IntentCategory | None = None
    collaborate: bool = False


@dataclass(frozen=True)
class AIResponse:
    """Text produced by one adapter call or by a collaborative synthesis."""

    content: str
    provider_id: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CollaborativeResult:
    """Both opinions plus the synthesised decision.  Never partially filled."""

    design_opinion: AIResponse
    logic_opinion: AIResponse
    final_decision: str
    reasoning: str
