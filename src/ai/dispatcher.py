"""Request dispatcher: pick the specialist(s) for a request and call them."""

from __future__ import annotations

import logging

from src.ai.classifier import classify
from src.ai.collaboration import CollaborationSynthesizer
from src.ai.providers import SpecializedAdapter
from src.ai.types import AIRequest, AIResponse, IntentCategory

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """Route an ``AIRequest`` to the design specialist, the logic specialist,
    or a collaboration between both.

    ``mixed_route`` decides where MIXED requests go when collaboration is not
    requested; it defaults to the design specialist (single, cheaper call).

    Adapter failures propagate unchanged.  There is no retry and no fallback
    to the other specialist.
    """

    def __init__(
        self,
        design: SpecializedAdapter,
        logic: SpecializedAdapter,
        *,
        synthesizer: CollaborationSynthesizer | None = None,
        mixed_route: IntentCategory = IntentCategory.DESIGN,
    ):
        if mixed_route is IntentCategory.MIXED:
            raise ValueError("mixed_route must be DESIGN or LOGIC")
        self._design = design
        self._logic = logic
        self._synthesizer = synthesizer or CollaborationSynthesizer(design, logic)
        self._mixed_route = mixed_route

    def resolve_intent(self, request: AIRequest) -> IntentCategory:
        """Explicit intent wins; otherwise classify the prompt."""
        if request.intent is not None:
            return request.intent
        return classify(request.prompt)

    def dispatch(self, request: AIRequest) -> AIResponse:
        intent = self.resolve_intent(request)
        logger.debug(
            "Dispatching request (intent=%s, explicit=%s, collaborate=%s)",
            intent.value, request.intent is not None, request.collaborate,
        )

        if intent is IntentCategory.DESIGN:
            return self._design.analyze(request.prompt, request.context)
        if intent is IntentCategory.LOGIC:
            return self._logic.analyze(request.prompt, request.context)

        if not request.collaborate:
            adapter = self._design if self._mixed_route is IntentCategory.DESIGN else self._logic
            return adapter.analyze(request.prompt, request.context)

        result = self._synthesizer.collaborate(request)
        return AIResponse(
            content=result.final_decision,
            provider_id=self._design.provider_id,
            metadata={
                "collaborative": True,
                "design_opinion": result.design_opinion.content,
                "design_provider": result.design_opinion.provider_id,
                "logic_opinion": result.logic_opinion.content,
                "logic_provider": result.logic_opinion.provider_id,
                "reasoning": result.reasoning,
            },
        )
