"""Detection orchestrator.

Runs the detection stages (walls, doors, clashes, optimization) behind an
async interface. The detectors themselves are synchronous pure functions;
the orchestrator splits each stage into sub-steps, reports progress between
them, checks for cancellation at every step boundary and turns a raising
detector into a ``failed`` outcome instead of propagating it.

Nothing is retried: a failed or cancelled stage is re-run by the caller.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..config import ClashSettings, DoorSettings, OptimizationSettings
from ..core.model import BackingPlacement, WallSegment
from .clashes import RULE_ORDER, prepare_inputs, run_rule
from .doors import detect_doors
from .optimizer import apply_zones, build_proximity_graph, build_zones, find_components, resolve_settings
from .results import (
    ConflictsResult,
    DetectionResult,
    DetectionResults,
    DoorsResult,
    OptimizationResult,
    WallsResult,
    merge_results,
)
from .validators import validate_backings, wall_problem

LOGGER = logging.getLogger(__name__)

STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_WALLS_DETECTED = "walls_detected"
STATE_OPENINGS_DETECTED = "openings_detected"
STATE_CLASHES_DETECTED = "clashes_detected"
STATE_OPTIMIZED = "optimized"
STATE_FAILED = "failed"
STATE_CANCELLED = "cancelled"

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"

ProgressCallback = Callable[[str, int, str], None]
WallDetector = Callable[[Any], Any]
Step = Tuple[str, Callable[[Dict[str, Any]], Any]]

_RULE_LABELS = {
    "backing_overlap": "Checking backing overlaps...",
    "door_clearance": "Checking door clearances...",
    "spacing": "Checking backing spacing...",
    "structural": "Checking structural support...",
}


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a stage."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True)
class StageOutcome:
    """How a stage ended.

    Attributes:
        stage: "walls", "doors", "conflicts" or "optimization".
        status: "completed", "failed" or "cancelled".
        result: The tagged result, only set when completed.
        message: Failure reason or a short completion note.
    """

    stage: str
    status: str
    result: Optional[DetectionResult] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == STATUS_COMPLETED


class DetectionOrchestrator:
    """Sequences detection stages and reports their progress.

    Args:
        wall_detector: Callable turning a drawing image into wall segments,
            sync or async. Required only for :meth:`detect_walls`.
        on_progress: Called as ``on_progress(stage, percent, message)``;
            percent rises monotonically from 0 to 100 within a stage.
    """

    def __init__(
        self,
        wall_detector: Optional[WallDetector] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.wall_detector = wall_detector
        self.on_progress = on_progress
        self.state = STATE_IDLE
        self.progress = 0

    def reset(self) -> None:
        """Return to ``idle`` after the caller has consumed a stage result."""
        self.state = STATE_IDLE
        self.progress = 0

    def _report(self, stage: str, percent: int, message: str) -> None:
        self.progress = percent
        if self.on_progress is not None:
            self.on_progress(stage, percent, message)

    def _fail(self, stage: str, message: str) -> StageOutcome:
        LOGGER.warning("%s stage failed: %s", stage, message)
        self.state = STATE_FAILED
        return StageOutcome(stage, STATUS_FAILED, message=message)

    def _cancel(self, stage: str) -> StageOutcome:
        LOGGER.info("%s stage cancelled", stage)
        self.state = STATE_CANCELLED
        return StageOutcome(stage, STATUS_CANCELLED, message="Cancelled")

    async def _run_stage(
        self,
        stage: str,
        done_state: str,
        steps: Sequence[Step],
        token: Optional[CancellationToken],
    ) -> StageOutcome:
        """Run ``steps`` in order; the last one must store ``context["result"]``."""
        self.state = STATE_RUNNING
        self._report(stage, 0, "Starting...")
        context: Dict[str, Any] = {}
        total = len(steps)

        try:
            for number, (message, step) in enumerate(steps, start=1):
                if token is not None and token.cancelled:
                    return self._cancel(stage)
                outcome = step(context)
                if inspect.isawaitable(outcome):
                    await outcome
                self._report(stage, round(number * 100 / total), message)
                await asyncio.sleep(0)
        except asyncio.CancelledError:
            # The caller dropped the task; nothing is committed
            LOGGER.info("%s stage task cancelled", stage)
            self.state = STATE_CANCELLED
            raise
        except Exception as e:
            LOGGER.exception("%s stage raised", stage)
            return self._fail(stage, str(e) or type(e).__name__)

        if token is not None and token.cancelled:
            return self._cancel(stage)

        self.state = done_state
        LOGGER.info("%s stage completed", stage)
        return StageOutcome(stage, STATUS_COMPLETED, result=context["result"])

    async def detect_walls(self, image: Any, token: Optional[CancellationToken] = None) -> StageOutcome:
        """Extract walls from a drawing image with the configured detector."""
        if self.wall_detector is None:
            return self._fail("walls", "No wall detector configured")
        if image is None:
            return self._fail("walls", "No drawing provided for analysis")

        async def extract(ctx):
            walls = self.wall_detector(image)
            if inspect.isawaitable(walls):
                walls = await walls
            ctx["walls"] = list(walls)

        def keep_usable(ctx):
            usable = []
            for wall in ctx["walls"]:
                problem = wall_problem(wall)
                if problem is not None:
                    LOGGER.warning("Dropping detected wall %r: %s", wall.id, problem)
                    continue
                usable.append(wall)
            ctx["result"] = WallsResult(tuple(usable))

        steps = [
            ("Analyzing drawing geometry...", extract),
            ("Validating wall segments...", keep_usable),
        ]
        return await self._run_stage("walls", STATE_WALLS_DETECTED, steps, token)

    async def detect_doors(
        self,
        walls: Sequence[WallSegment],
        settings: Optional[DoorSettings] = None,
        token: Optional[CancellationToken] = None,
    ) -> StageOutcome:
        """Detect door openings; walls must have been detected first."""
        if not walls:
            return self._fail("doors", "Walls must be detected before doors")

        def scan(ctx):
            ctx["result"] = DoorsResult(tuple(detect_doors(walls, settings)))

        return await self._run_stage(
            "doors", STATE_OPENINGS_DETECTED, [("Scanning wall openings...", scan)], token
        )

    async def detect_clashes(
        self,
        backings: Sequence[BackingPlacement],
        walls: Sequence[WallSegment],
        settings: Optional[ClashSettings] = None,
        token: Optional[CancellationToken] = None,
    ) -> StageOutcome:
        """Run every clash rule as its own step."""
        if not backings:
            return self._fail("conflicts", "No backing placements to analyze")
        if settings is None:
            settings = ClashSettings()

        def prepare(ctx):
            valid, usable_walls, clashes = prepare_inputs(backings, walls)
            ctx.update(valid=valid, walls=usable_walls, clashes=clashes)

        def rule_step(name):
            def run(ctx):
                ctx["clashes"].extend(run_rule(name, ctx["valid"], ctx["walls"], settings))

            return run

        def collect(ctx):
            ctx["result"] = ConflictsResult(tuple(ctx["clashes"]))

        steps: List[Step] = [("Validating placements...", prepare)]
        steps.extend((_RULE_LABELS.get(name, name), rule_step(name)) for name in RULE_ORDER)
        steps.append(("Collecting results...", collect))
        return await self._run_stage("conflicts", STATE_CLASHES_DETECTED, steps, token)

    async def optimize(
        self,
        backings: Sequence[BackingPlacement],
        settings: Optional[OptimizationSettings] = None,
        token: Optional[CancellationToken] = None,
    ) -> StageOutcome:
        """Group backings into zones and mark them as optimized."""
        if not backings:
            return self._fail("optimization", "No backing placements to optimize")

        def analyze(ctx):
            ctx["settings"] = resolve_settings(settings=settings)
            validate_backings(backings)

        def group(ctx):
            ctx["graph"] = build_proximity_graph(backings, ctx["settings"])

        def components(ctx):
            ctx["components"] = find_components(ctx["graph"])

        def zones(ctx):
            ctx["zones"] = build_zones(backings, ctx["components"], ctx["settings"])

        def finalize(ctx):
            ctx["result"] = OptimizationResult(
                optimized_backings=tuple(apply_zones(backings, ctx["zones"])),
                zones=tuple(ctx["zones"]),
            )

        steps = [
            ("Analyzing placement patterns...", analyze),
            ("Grouping nearby backings...", group),
            ("Optimizing material usage...", components),
            ("Calculating zones...", zones),
            ("Finalizing layout...", finalize),
        ]
        return await self._run_stage("optimization", STATE_OPTIMIZED, steps, token)

    async def run_all(
        self,
        backings: Sequence[BackingPlacement],
        walls: Sequence[WallSegment] = (),
        image: Any = None,
        door_settings: Optional[DoorSettings] = None,
        clash_settings: Optional[ClashSettings] = None,
        optimization_settings: Optional[OptimizationSettings] = None,
        token: Optional[CancellationToken] = None,
    ) -> Tuple[DetectionResults, List[StageOutcome]]:
        """Run walls (when an image is given), doors, clashes and optimization.

        Stops at the first stage that does not complete. Walls found by the
        wall stage replace ``walls`` for the later stages; door detection is
        skipped when there are no walls.

        Returns:
            The merged results of the completed stages and every outcome.
        """
        results = DetectionResults()
        outcomes: List[StageOutcome] = []

        if image is not None:
            outcome = await self.detect_walls(image, token)
            outcomes.append(outcome)
            if not outcome.ok:
                return results, outcomes
            results = merge_results(results, outcome.result)
            walls = outcome.result.walls

        stages = []
        # Clash detection and optimization do not depend on walls
        if walls:
            stages.append(lambda: self.detect_doors(walls, door_settings, token))
        stages.append(lambda: self.detect_clashes(backings, walls, clash_settings, token))
        stages.append(lambda: self.optimize(backings, optimization_settings, token))
        for run in stages:
            outcome = await run()
            outcomes.append(outcome)
            if not outcome.ok:
                break
            results = merge_results(results, outcome.result)

        return results, outcomes
