"""Two-perspective collaboration: fan out to both specialists, then synthesise.

The fan-out is fail-fast.  Both specialist calls are submitted to a
two-worker pool and joined with ``FIRST_EXCEPTION``: as soon as one branch
raises, the other is cancelled (or, if already running, abandoned and its
result discarded) and the error propagates.  The synthesis prompt is only
built once both opinions are in hand, so a ``CollaborativeResult`` always
carries both.
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

from src.ai.providers import SpecializedAdapter
from src.ai.types import AIRequest, AIResponse, CollaborativeResult
from src.prompts import SYNTHESIS_REASONING, build_synthesis_prompt

logger = logging.getLogger(__name__)


class CollaborationSynthesizer:
    """Merge a design and a logic opinion into one decision.

    The synthesis call goes to the logic specialist: reconciling two
    recommendations is itself a business-reasoning task.
    """

    def __init__(self, design: SpecializedAdapter, logic: SpecializedAdapter):
        self._design = design
        self._logic = logic

    def collaborate(self, request: AIRequest) -> CollaborativeResult:
        design_opinion, logic_opinion = self._gather_opinions(request)

        synthesis_prompt = build_synthesis_prompt(
            request.prompt, design_opinion.content, logic_opinion.content,
        )
        final = self._logic.analyze(synthesis_prompt)
        logger.debug(
            "Collaboration synthesised by %s (%d chars)", final.provider_id, len(final.content),
        )
        return CollaborativeResult(
            design_opinion=design_opinion,
            logic_opinion=logic_opinion,
            final_decision=final.content,
            reasoning=SYNTHESIS_REASONING,
        )

    def _gather_opinions(self, request: AIRequest) -> tuple[AIResponse, AIResponse]:
        """Run both specialists concurrently; raise the first failure."""
        pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="collaborate")
        try:
            design_future = pool.submit(self._design.analyze, request.prompt, request.context)
            logic_future = pool.submit(self._logic.analyze, request.prompt, request.context)
            futures: list[Future[AIResponse]] = [design_future, logic_future]

            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in futures if f in done and f.exception() is not None]
            if failed:
                for future in pending:
                    future.cancel()
                logger.warning(
                    "Collaboration aborted: %s (%d branch(es) still pending, discarded)",
                    failed[0].exception(), len(pending),
                )
                raise failed[0].exception()

            return design_future.result(), logic_future.result()
        finally:
            # Don't block on an abandoned branch after a failure
            pool.shutdown(wait=False, cancel_futures=True)
