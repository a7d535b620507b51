"""Settings-driven planning with memoisation and debounced refresh.

The planner is pure and synchronous; this layer is what an editor calls
after the user changes settings or the event log grows.  Auto-zoom
disabled means "no plan" (``None``), never an empty plan.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .asset import AssetGeometry
from .cache import PlanCache, cache_key
from .constraints import AutoZoomSettings, ZoomConstraints
from .events import InputEvent
from .geometry import Size
from .mapping import CaptureMetadata, map_events_to_asset_space
from .planner import CameraPlan, VirtualCameraPlanner

DEFAULT_DEBOUNCE = 0.25  # seconds


@dataclass(frozen=True)
class PlanInputs:
    events: List[InputEvent]  # already in asset pixel space
    source_size: Size
    duration: float
    constraints: ZoomConstraints
    key: int


class AutoZoomService:
    def __init__(
        self,
        planner: Optional[VirtualCameraPlanner] = None,
        cache: Optional[PlanCache] = None,
        base_constraints: Optional[ZoomConstraints] = None,
        debounce: float = DEFAULT_DEBOUNCE,
    ):
        self.planner = planner or VirtualCameraPlanner()
        self.cache = cache or PlanCache()
        self.base_constraints = base_constraints
        self.debounce = debounce
        self.logger = logging.getLogger(__name__)
        self._refresh_task: Optional[asyncio.Task] = None

    def make_plan_inputs(
        self,
        events: Sequence[InputEvent],
        asset: AssetGeometry,
        settings: AutoZoomSettings,
        metadata: Optional[CaptureMetadata] = None,
    ) -> PlanInputs:
        mapped = map_events_to_asset_space(events, metadata, asset.size)
        constraints = settings.constraints(base=self.base_constraints)
        key = cache_key(mapped, constraints, asset.duration, asset.size)
        return PlanInputs(mapped, asset.size, asset.duration, constraints, key)

    def make_camera_plan(
        self,
        events: Sequence[InputEvent],
        asset: AssetGeometry,
        settings: AutoZoomSettings,
        metadata: Optional[CaptureMetadata] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Optional[CameraPlan]:
        """Plan for the asset, reusing the cached plan when nothing relevant changed"""
        settings = settings.clamped()
        if not settings.is_enabled:
            self.logger.debug("Auto-zoom disabled; no camera plan")
            return None

        inputs = self.make_plan_inputs(events, asset, settings, metadata)
        cached = self.cache.get(inputs.key)
        if cached is not None:
            return cached

        plan = self.planner.plan(
            inputs.events,
            inputs.source_size,
            inputs.duration,
            inputs.constraints,
            cancel_event=cancel_event,
        )
        self.cache.put(inputs.key, plan)
        return plan

    async def make_camera_plan_async(
        self,
        events: Sequence[InputEvent],
        asset: AssetGeometry,
        settings: AutoZoomSettings,
        metadata: Optional[CaptureMetadata] = None,
    ) -> Optional[CameraPlan]:
        """Plan on a worker thread; cancelling the awaiting task stops the worker"""
        cancel_event = threading.Event()
        try:
            return await asyncio.to_thread(
                self.make_camera_plan, events, asset, settings, metadata, cancel_event
            )
        except asyncio.CancelledError:
            cancel_event.set()
            raise

    def refresh(
        self,
        events: Sequence[InputEvent],
        asset: AssetGeometry,
        settings: AutoZoomSettings,
        metadata: Optional[CaptureMetadata] = None,
        on_plan: Optional[Callable[[Optional[CameraPlan]], None]] = None,
    ) -> asyncio.Task:
        """Schedule a debounced replan, superseding any refresh still in flight.

        Must be called from a running event loop.
        """
        if self._refresh_task is not None and not self._refresh_task.done():
            self.logger.debug("Superseding in-flight plan refresh")
            self._refresh_task.cancel()
        self._refresh_task = asyncio.create_task(
            self._debounced_plan(list(events), asset, settings, metadata, on_plan)
        )
        return self._refresh_task

    async def _debounced_plan(
        self,
        events: List[InputEvent],
        asset: AssetGeometry,
        settings: AutoZoomSettings,
        metadata: Optional[CaptureMetadata],
        on_plan: Optional[Callable[[Optional[CameraPlan]], None]],
    ) -> Optional[CameraPlan]:
        await asyncio.sleep(self.debounce)
        plan = await self.make_camera_plan_async(events, asset, settings, metadata)
        if on_plan is not None:
            on_plan(plan)
        return plan
