"""
Variation Orchestrator
Renders one source image in every catalog style concurrently.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from ..errors import BatchFailureError
from .clients import BaseGenerator, GenerationResult, StyleOutcome
from .datauri import SourceImage, decode_source_image
from .prompts import compose_prompt
from .styles import STYLE_CATALOG, StyleDescriptor

logger = logging.getLogger(__name__)

BATCH_FAILURE_MESSAGE = "failed to produce any image, please retry"


@dataclass
class BatchOutcome:
    """Aggregate of one batch, built only after every style has settled."""
    results: List[GenerationResult] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def failed_styles(self) -> List[str]:
        return list(self.failures)


class VariationOrchestrator:
    """
    Fans one source image out to the generator once per style.

    Each style's call is isolated: a failure becomes a failed outcome
    instead of aborting the batch. The batch only fails when no style
    produced an image.
    """

    def __init__(
        self,
        generator: BaseGenerator,
        styles: Sequence[StyleDescriptor] = STYLE_CATALOG,
        timeout: Optional[float] = None,
    ):
        """
        Initialize VariationOrchestrator.

        Args:
            generator: Client used for every per-style call
            styles: Styles rendered per batch
            timeout: Optional batch deadline in seconds. Calls still running
                at the deadline are cancelled and count as failures. None lets
                every call run to completion.
        """
        self.generator = generator
        self.styles = tuple(styles)
        self.timeout = timeout

    async def _run_style(self, image: SourceImage, user_note: str, style: StyleDescriptor) -> StyleOutcome:
        try:
            prompt = compose_prompt(user_note, style)
            result = await self.generator.generate(image, prompt, style)
            return StyleOutcome(style=style, result=result)
        except Exception as e:
            logger.error(f"Error generating style {style.name}: {e}")
            return StyleOutcome(style=style, error=str(e) or type(e).__name__)

    async def settle_all(self, image: SourceImage, user_note: str) -> List[StyleOutcome]:
        """
        Run every style concurrently and wait for all of them to settle.

        Returns:
            One outcome per style, in completion order
        """
        tasks = {
            asyncio.create_task(self._run_style(image, user_note, style)): style
            for style in self.styles
        }
        outcomes: List[StyleOutcome] = []

        try:
            for next_done in asyncio.as_completed(list(tasks), timeout=self.timeout):
                outcomes.append(await next_done)
        except asyncio.TimeoutError:
            for task, style in tasks.items():
                if not task.done():
                    task.cancel()
                    logger.error(f"Style {style.name} exceeded the {self.timeout}s batch deadline")
                    outcomes.append(StyleOutcome(style=style, error="timed out"))
                elif all(o.style != style for o in outcomes):
                    outcomes.append(task.result())

        return outcomes

    async def generate_batch(self, source_image: Union[str, SourceImage], user_note: str = "") -> BatchOutcome:
        """
        Generate every variation and report successes and failures.

        Raises:
            ValidationError: if the source image cannot be decoded
            BatchFailureError: if no style produced an image
        """
        # Decoded once, shared by all calls
        image = source_image if isinstance(source_image, SourceImage) else decode_source_image(source_image)

        outcomes = await self.settle_all(image, user_note)

        batch = BatchOutcome()
        for outcome in outcomes:
            if outcome.success:
                batch.results.append(outcome.result)
            else:
                batch.failures[outcome.style.name] = outcome.error

        logger.info(f"Batch settled: {len(batch.results)} succeeded, {len(batch.failures)} failed")

        if not batch.results:
            logger.error(f"All styles failed: {batch.failures}")
            raise BatchFailureError(BATCH_FAILURE_MESSAGE)

        return batch

    async def generate_all(self, source_image: Union[str, SourceImage], user_note: str = "") -> List[GenerationResult]:
        """Generate every variation, returning only the successful results."""
        batch = await self.generate_batch(source_image, user_note)
        return batch.results
