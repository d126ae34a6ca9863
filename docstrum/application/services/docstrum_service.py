"""Docstrum service - orchestrates the per-page analysis pipeline."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

import numpy as np

from ...domain.entities.component import ConnectedComponent, NeighborSet
from ...domain.entities.page import PageInput
from ...domain.entities.result import ImageResult, OrientationEstimate
from ...domain.services.histogram import build_angle_histogram, fold_angles
from ...domain.services.neighbor_finder import collect_angles, compute_neighbor_table
from ...domain.services.polynomial_fit import (
    SkewEstimate,
    estimate_skew,
    estimate_spacing,
    fit_polynomial,
    to_angle_units,
)
from ...domain.value_objects.config import DocstrumConfig
from ...domain.value_objects.histogram import Histogram
from ...domain.value_objects.polynomial import Polynomial
from ...exceptions import (
    ArtifactError,
    DocstrumError,
    InvalidConfigurationError,
    UpstreamSegmentationError,
)
from ..ports.artifacts import ArtifactRenderer, ArtifactSink, RenderRequest
from ..ports.component_extractor import ComponentExtractor
from ..ports.event_publisher import EventPublisher, ProcessingEvent, SimpleEventPublisher

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """Per-page processing states, in order. Never persisted."""
    LOADED = "loaded"
    COMPONENTS_EXTRACTED = "components_extracted"
    COMPONENTS_FILTERED = "components_filtered"
    NEIGHBORS_COMPUTED = "neighbors_computed"
    ANGLES_FOLDED = "angles_folded"
    HISTOGRAM_BUILT = "histogram_built"
    CURVE_FIT = "curve_fit"
    CRITICAL_POINTS_EXTRACTED = "critical_points_extracted"
    SPACING_ESTIMATED = "spacing_estimated"
    REPORTED = "reported"


@dataclass
class PipelineContext:
    """Context passed through pipeline steps."""
    page: PageInput
    config: DocstrumConfig
    stage: PipelineStage = PipelineStage.LOADED
    components: tuple[ConnectedComponent, ...] = ()
    neighbor_table: tuple[NeighborSet, ...] = ()
    angles: np.ndarray = field(default_factory=lambda: np.zeros(0))
    histogram: Histogram | None = None
    polynomial: Polynomial | None = None
    skew: SkewEstimate | None = None
    spacing: float | None = None
    estimate: OrientationEstimate | None = None


class PipelineStep:
    """Base class for pipeline steps."""

    stage: PipelineStage

    def __init__(self, name: str):
        self.name = name

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        """Execute this step and return updated context."""
        raise NotImplementedError


class ExtractComponentsStep(PipelineStep):
    """Step 1: Obtain connected components (external segmentation)."""

    stage = PipelineStage.COMPONENTS_EXTRACTED

    def __init__(self, extractor: ComponentExtractor | None):
        super().__init__("extract_components")
        self._extractor = extractor

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        if ctx.page.has_components:
            ctx.components = tuple(ctx.page.components)
            return ctx

        if self._extractor is None:
            raise InvalidConfigurationError(
                f"Page {ctx.page.name!r} has no components and no extractor is configured",
                config_key="extractor"
            )

        try:
            ctx.components = tuple(self._extractor.extract(ctx.page))
        except UpstreamSegmentationError:
            raise
        except Exception as e:
            raise UpstreamSegmentationError(
                f"{type(e).__name__}: {e}", page_name=ctx.page.name
            ) from e

        logger.debug(f"{ctx.page.name}: extracted {len(ctx.components)} components")
        return ctx


class FilterComponentsStep(PipelineStep):
    """Step 2: Drop components too small to be glyphs."""

    stage = PipelineStage.COMPONENTS_FILTERED

    def __init__(self):
        super().__init__("filter_components")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        min_area = ctx.config.min_component_area
        kept = tuple(cc for cc in ctx.components if cc.area >= min_area)
        dropped = len(ctx.components) - len(kept)
        if dropped:
            logger.debug(f"{ctx.page.name}: dropped {dropped} components below {min_area} px^2")
        ctx.components = kept
        return ctx


class ComputeNeighborsStep(PipelineStep):
    """Step 3: k nearest neighbours of every component."""

    stage = PipelineStage.NEIGHBORS_COMPUTED

    def __init__(self):
        super().__init__("compute_neighbors")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.neighbor_table = tuple(compute_neighbor_table(
            ctx.components,
            ctx.config.k,
            max_workers=ctx.config.neighbor_workers
        ))
        return ctx


class FoldAnglesStep(PipelineStep):
    """Step 4: Undirected neighbour orientations."""

    stage = PipelineStage.ANGLES_FOLDED

    def __init__(self):
        super().__init__("fold_angles")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.angles = fold_angles(collect_angles(ctx.neighbor_table))
        return ctx


class BuildHistogramStep(PipelineStep):
    """Step 5: Smoothed circular angle histogram."""

    stage = PipelineStage.HISTOGRAM_BUILT

    def __init__(self):
        super().__init__("build_histogram")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.histogram = build_angle_histogram(
            ctx.angles,
            nbins=ctx.config.nbins,
            alpha=ctx.config.alpha
        )
        return ctx


class FitCurveStep(PipelineStep):
    """Step 6: Least-squares polynomial through the histogram."""

    stage = PipelineStage.CURVE_FIT

    def __init__(self):
        super().__init__("fit_curve")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.polynomial = fit_polynomial(ctx.histogram.values, ctx.config.degree)
        return ctx


class ExtractCriticalPointsStep(PipelineStep):
    """Step 7: Critical points of the fit and the dominant peak."""

    stage = PipelineStage.CRITICAL_POINTS_EXTRACTED

    def __init__(self):
        super().__init__("extract_critical_points")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.skew = estimate_skew(ctx.histogram, ctx.polynomial, step=ctx.config.scan_step)
        return ctx


class EstimateSpacingStep(PipelineStep):
    """Step 8: Neighbour spacing along the skew direction."""

    stage = PipelineStage.SPACING_ESTIMATED

    def __init__(self):
        super().__init__("estimate_spacing")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.spacing = estimate_spacing(
            ctx.neighbor_table,
            ctx.skew.angle,
            tolerance=math.radians(ctx.config.spacing_angle_tolerance),
            bin_width=ctx.config.spacing_bin_width,
            alpha=ctx.config.spacing_alpha
        )
        return ctx


class ReportStep(PipelineStep):
    """Step 9: Assemble the numeric result."""

    stage = PipelineStage.REPORTED

    def __init__(self):
        super().__init__("report")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.estimate = OrientationEstimate(
            skew_angle=ctx.skew.angle,
            coefficients=ctx.polynomial.coefficients,
            critical_points=to_angle_units(ctx.skew.critical_points, ctx.histogram),
            spacing=ctx.spacing,
            peak_source=ctx.skew.source,
            component_count=len(ctx.components),
            pair_count=int(ctx.angles.size)
        )
        logger.info(
            f"{ctx.page.name}: skew {ctx.estimate.skew_degrees:.2f} deg, "
            f"spacing {ctx.spacing if ctx.spacing is not None else 'n/a'}, "
            f"{ctx.estimate.component_count} components"
        )
        return ctx


class DocstrumService:
    """Service estimating skew and spacing of pages.

    Takes an explicit configuration per instance and never reads
    process-wide state.
    """

    def __init__(
        self,
        config: DocstrumConfig | None = None,
        extractor: ComponentExtractor | None = None,
        renderer: ArtifactRenderer | None = None,
        sink: ArtifactSink | None = None,
        events: EventPublisher | None = None
    ):
        self._config = config or DocstrumConfig()
        self._extractor = extractor
        self._renderer = renderer
        self._sink = sink
        self._events = events or SimpleEventPublisher()
        self._pipeline = self._build_pipeline()

    @property
    def config(self) -> DocstrumConfig:
        return self._config

    def _build_pipeline(self) -> list[PipelineStep]:
        """Build processing pipeline."""
        return [
            ExtractComponentsStep(self._extractor),
            FilterComponentsStep(),
            ComputeNeighborsStep(),
            FoldAnglesStep(),
            BuildHistogramStep(),
            FitCurveStep(),
            ExtractCriticalPointsStep(),
            EstimateSpacingStep(),
            ReportStep(),
        ]

    def run(self, page: PageInput) -> PipelineContext:
        """Run every stage for one page.

        Raises:
            DocstrumError: On the first failing stage
        """
        ctx = PipelineContext(page=page, config=self._config)
        for step in self._pipeline:
            self._events.publish(ProcessingEvent(
                stage=step.name,
                message=f"Executing {step.name}",
                page_name=page.name
            ))
            ctx = step.execute(ctx)
            ctx.stage = step.stage
        return ctx

    def estimate(self, components: Iterable[ConnectedComponent], name: str = "page") -> OrientationEstimate:
        """Estimate skew and spacing from already-extracted components.

        Raises:
            InvalidConfigurationError: If no component survives filtering
            NumericDegeneracyError: If the histogram cannot be fitted
        """
        return self.run(PageInput.from_components(name, list(components))).estimate

    def process(self, page: PageInput) -> ImageResult:
        """Analyse one page, reporting failure instead of raising.

        Artifacts are rendered and stored only after every numeric stage
        succeeded, so a failed page leaves nothing behind.
        """
        start_time = time.time()

        self._events.publish(ProcessingEvent(
            stage="start",
            message=f"Starting {page.name}",
            page_name=page.name
        ))

        try:
            ctx = self.run(page)
            artifacts = self._emit_artifacts(ctx)
        except DocstrumError as e:
            elapsed = (time.time() - start_time) * 1000
            logger.debug(f"Failed {page.name}: {e}")
            return ImageResult.failure(page.name, e.message, e.error_code, elapsed)
        except Exception as e:
            elapsed = (time.time() - start_time) * 1000
            logger.exception(f"Unexpected error processing {page.name}")
            return ImageResult.failure(page.name, f"{type(e).__name__}: {e}", None, elapsed)

        elapsed = (time.time() - start_time) * 1000

        self._events.publish(ProcessingEvent(
            stage="complete",
            message=f"Processed {page.name}",
            progress=1.0,
            page_name=page.name
        ))

        return ImageResult.success_result(
            page.name,
            ctx.estimate,
            artifacts=artifacts,
            processing_time_ms=elapsed
        )

    def _emit_artifacts(self, ctx: PipelineContext) -> tuple[str, ...]:
        if self._renderer is None:
            return ()

        request = RenderRequest(
            page_name=ctx.page.name,
            components=ctx.components,
            neighbor_table=ctx.neighbor_table,
            histogram=ctx.histogram,
            polynomial=ctx.polynomial,
            estimate=ctx.estimate,
            page_size=ctx.page.size
        )
        try:
            rasters = self._renderer.render(request)
        except ArtifactError:
            raise
        except Exception as e:
            raise ArtifactError(f"Rendering failed: {e}") from e

        if self._sink is not None:
            self._store(ctx.page.name, rasters)

        return tuple(rasters)

    def _store(self, page_name: str, rasters: dict[str, np.ndarray]) -> None:
        """Write every raster, or none: a failed write removes the earlier ones."""
        attempted: list[str] = []
        try:
            for artifact_name, raster in rasters.items():
                attempted.append(artifact_name)
                self._sink.write(page_name, artifact_name, raster)
        except Exception as e:
            try:
                self._sink.discard(page_name, attempted)
            except Exception:
                logger.exception(f"Could not discard partial artifacts of {page_name}")
            if isinstance(e, ArtifactError):
                raise
            raise ArtifactError(f"Could not store artifact: {e}", attempted[-1]) from e

    def subscribe_to_events(self, callback: Callable[[ProcessingEvent], None]) -> None:
        """Subscribe to processing events."""
        self._events.subscribe(callback)
