"""
Composition orchestrator.

Sequences a generation request: export the selection, cut out the product
through the bridge, optionally fetch AI backgrounds, then build frames.

Export and background removal are fatal steps: their failure fails the
request. Background fetches are best-effort: their failure degrades to the
template's fallback fill. Frames already appended to the page are not
removed when a later step fails.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from listing_studio.config import settings
from listing_studio.assets.acquisition import AssetAcquisition, build_background_url
from listing_studio.generation.state import (
    GenerationPhase,
    GenerationRun,
    GenerationState,
    StepOutcome,
)
from listing_studio.layout.engine import LayoutEngine
from listing_studio.layout.templates import (
    MAIN_TEMPLATE,
    TEMPLATES,
    background_prompt,
    remote_prompt_keys,
)

logger = logging.getLogger("listing.generation")


class CompositionOrchestrator:

    def __init__(
        self,
        assets: AssetAcquisition,
        layout: LayoutEngine,
        state: GenerationState,
        export_scale: float = settings.SELECTION_EXPORT_SCALE,
        url_builder: Callable[[str, int], str] = build_background_url,
    ):
        self.assets = assets
        self.layout = layout
        self.state = state
        self.export_scale = export_scale
        self.url_builder = url_builder
        self.last_run: Optional[GenerationRun] = None

    async def _fatal_step(self, run: GenerationRun, step: str, operation: Awaitable):
        try:
            outcome = StepOutcome.ok(await operation)
        except Exception as e:
            outcome = StepOutcome.fatal(e)
        return run.record(step, outcome).unwrap()

    async def _best_effort_step(self, run: GenerationRun, step: str, operation: Awaitable) -> StepOutcome:
        try:
            outcome = StepOutcome.ok(await operation)
        except Exception as e:
            logger.warning(f"Best-effort step {step} failed, using fallback: {e}")
            outcome = StepOutcome.degraded(None, e)
        return run.record(step, outcome)

    async def _acquire_cutout(self, run: GenerationRun) -> bytes:
        run.advance(GenerationPhase.EXPORTING)
        selection_bytes = await self._fatal_step(
            run, "export_selection", self.assets.export_selection(self.export_scale)
        )
        run.advance(GenerationPhase.REMOVING_BACKGROUND)
        return await self._fatal_step(
            run, "remove_background", self.assets.remove_background(selection_bytes)
        )

    async def _fetch_background(self, run: GenerationRun, prompt_key: str, size_px: int, user_prompt: Optional[str]) -> StepOutcome:
        async def fetch() -> bytes:
            url = self.url_builder(background_prompt(prompt_key, user_prompt), size_px)
            data = await self.assets.fetch_remote_image(url)
            # Undecodable bytes (an error page, say) count as a failed fetch
            self.layout.host.create_image(data)
            return data

        return await self._best_effort_step(run, f"background:{prompt_key}", fetch())

    async def _run(self, run: GenerationRun, body: Callable[[GenerationRun], Awaitable[List[str]]]) -> GenerationRun:
        self.last_run = run
        logger.info(f"Starting {run.kind} generation at {run.size_px}px")
        try:
            run.frame_ids = await body(run)
        except Exception as e:
            run.error = str(e)
            run.advance(GenerationPhase.FAILED)
            logger.error(f"{run.kind} generation failed during {run.history[-2].value}: {e}")
            raise
        run.advance(GenerationPhase.DONE)
        logger.info(f"{run.kind} generation produced {len(run.frame_ids)} frame(s)")
        return run

    async def generate_main(self, size_px: int) -> GenerationRun:
        """Build the white-background main image from the selection."""

        async def body(run: GenerationRun) -> List[str]:
            cutout = await self._acquire_cutout(run)
            run.advance(GenerationPhase.BUILDING)
            return [self.layout.build_template(MAIN_TEMPLATE, size_px, cutout).id]

        return await self._run(GenerationRun(kind="main", size_px=size_px), body)

    async def generate_six(self, size_px: int, background_prompt_text: Optional[str] = None) -> GenerationRun:
        """
        Build all six templates from the selection.

        Args:
            size_px: Frame side in pixels
            background_prompt_text: Extra words for the lifestyle background

        Returns:
            The finished run; its frame ids also replace the generated set
        """

        async def body(run: GenerationRun) -> List[str]:
            await self.layout.ensure_fonts()
            cutout = await self._acquire_cutout(run)

            run.advance(GenerationPhase.FETCHING_BACKGROUNDS)
            keys = remote_prompt_keys()
            outcomes = await asyncio.gather(
                *(self._fetch_background(run, key, size_px, background_prompt_text) for key in keys)
            )
            backgrounds = {key: outcome.value for key, outcome in zip(keys, outcomes)}

            run.advance(GenerationPhase.BUILDING)
            frames = [self.layout.build_template(spec, size_px, cutout, backgrounds) for spec in TEMPLATES]
            frame_ids = [frame.id for frame in frames]
            self.state.replace(frame_ids)
            return frame_ids

        return await self._run(GenerationRun(kind="six", size_px=size_px), body)
