"""Tests for the per-page analysis pipeline."""

import math
from unittest.mock import Mock

import numpy as np
import pytest

from docstrum.application.ports.artifacts import MemoryArtifactSink
from docstrum.application.services.docstrum_service import DocstrumService, PipelineStage
from docstrum.adapters.rendering import OpenCVRenderer
from docstrum.config import ARTIFACT_NAMES
from docstrum.domain.entities.page import PageInput
from docstrum.domain.value_objects.config import build_config
from docstrum.domain.value_objects.polynomial import CriticalPointKind
from docstrum.exceptions import (
    ArtifactError,
    InvalidConfigurationError,
    NumericDegeneracyError,
    UpstreamSegmentationError,
)
from docstrum.tests.conftest import glyph


class FailingExtractor:
    """Extractor stub raising a chosen exception."""

    def __init__(self, error: Exception):
        self.error = error

    @property
    def name(self) -> str:
        return "failing"

    def extract(self, page):
        raise self.error


class FailingSink(MemoryArtifactSink):
    """Memory sink refusing one artifact."""

    def __init__(self, refused: str):
        super().__init__()
        self.refused = refused

    def write(self, page_name, artifact_name, raster):
        if artifact_name == self.refused:
            raise ArtifactError("disk full", artifact_name)
        super().write(page_name, artifact_name, raster)


class TestEstimate:
    """Numeric results on synthetic pages."""

    def test_horizontal_lines(self, horizontal_page):
        estimate = DocstrumService(build_config(k=4)).estimate(horizontal_page)
        assert abs(estimate.skew_degrees) < 1.5
        assert estimate.peak_source == "polynomial"
        assert len(estimate.coefficients) == 6
        assert estimate.component_count == len(horizontal_page)
        assert estimate.pair_count == 4 * len(horizontal_page)
        assert 7.0 <= estimate.spacing <= 12.0

    def test_critical_points_in_angle_units(self, horizontal_page):
        estimate = DocstrumService(build_config(k=4)).estimate(horizontal_page)
        assert estimate.critical_points
        for cp in estimate.critical_points:
            assert -math.pi / 2 <= cp.location < math.pi / 2
        kinds = [cp.kind for cp in estimate.critical_points]
        assert CriticalPointKind.MAXIMUM in kinds

    @pytest.mark.parametrize("angle_deg", [6.0, -6.0])
    def test_rotated_lines_keep_sign(self, make_lines, angle_deg):
        estimate = DocstrumService(build_config(k=4)).estimate(make_lines(angle_deg=angle_deg))
        assert estimate.skew_degrees * angle_deg > 0
        assert abs(estimate.skew_degrees) < 30

    def test_small_components_are_filtered(self, horizontal_page):
        specks = [glyph(1000 + i, 55 + 10 * i, 52, w=1, h=1) for i in range(20)]
        service = DocstrumService(build_config(k=4))
        estimate = service.estimate(horizontal_page + specks)
        assert estimate.component_count == len(horizontal_page)

    def test_neighbor_workers_do_not_change_result(self, make_lines):
        components = make_lines(angle_deg=3.0)
        serial = DocstrumService(build_config(k=4)).estimate(components)
        parallel = DocstrumService(build_config(k=4, neighbor_workers=4)).estimate(components)
        assert parallel == serial

    def test_empty_page_raises(self):
        with pytest.raises(InvalidConfigurationError):
            DocstrumService().estimate([])

    def test_everything_filtered_raises(self):
        specks = [glyph(i, 10 * i, 0, w=1, h=1) for i in range(1, 10)]
        with pytest.raises(InvalidConfigurationError):
            DocstrumService().estimate(specks)

    def test_single_component_has_no_orientation(self):
        with pytest.raises(NumericDegeneracyError):
            DocstrumService().estimate([glyph(1, 10, 10)])

    def test_degree_too_high_raises(self, horizontal_page):
        service = DocstrumService(build_config(nbins=4, degree=5))
        with pytest.raises(NumericDegeneracyError):
            service.estimate(horizontal_page)


class TestProcess:
    """Failure reporting and artifacts."""

    def test_success_result(self, horizontal_page):
        result = DocstrumService(build_config(k=4)).process(
            PageInput.from_components("page-1", horizontal_page)
        )
        assert result.success
        assert result.name == "page-1"
        assert result.error_code is None
        assert result.to_dict()["estimate"]["peak_source"] == "polynomial"

    def test_failure_result_carries_error_code(self):
        result = DocstrumService().process(PageInput.from_components("empty", []))
        assert not result.success
        assert result.estimate is None
        assert result.error_code == "CONFIG_ERROR"
        assert result.to_dict()["error_code"] == "CONFIG_ERROR"

    def test_missing_extractor(self):
        result = DocstrumService().process(PageInput.from_array("raw", np.zeros((4, 4))))
        assert result.error_code == "CONFIG_ERROR"

    def test_extractor_errors_are_segmentation_errors(self):
        service = DocstrumService(extractor=FailingExtractor(KeyError("labels")))
        result = service.process(PageInput.from_array("raw", np.zeros((4, 4))))
        assert result.error_code == "SEGMENTATION_ERROR"
        assert "KeyError" in result.error_message

    def test_segmentation_error_passes_through(self):
        error = UpstreamSegmentationError("bad scan", page_name="raw")
        service = DocstrumService(extractor=FailingExtractor(error))
        with pytest.raises(UpstreamSegmentationError) as exc_info:
            service.run(PageInput.from_array("raw", np.zeros((4, 4))))
        assert exc_info.value is error

    def test_artifacts_written_to_sink(self, horizontal_page):
        sink = MemoryArtifactSink()
        service = DocstrumService(build_config(k=4), renderer=OpenCVRenderer(), sink=sink)
        result = service.process(PageInput.from_components("page-1", horizontal_page))
        assert result.success
        assert result.artifacts == ARTIFACT_NAMES
        assert sink.names("page-1") == sorted(ARTIFACT_NAMES)
        assert sink.get("page-1", "nn_angles").shape == (400, 400)

    def test_failed_page_leaves_no_artifacts(self):
        sink = MemoryArtifactSink()
        service = DocstrumService(renderer=OpenCVRenderer(), sink=sink)
        result = service.process(PageInput.from_components("empty", []))
        assert not result.success
        assert not sink.has("empty")

    def test_failed_write_removes_earlier_artifacts(self, horizontal_page):
        sink = FailingSink(refused="docstrum")
        service = DocstrumService(build_config(k=4), renderer=OpenCVRenderer(), sink=sink)
        result = service.process(PageInput.from_components("page-1", horizontal_page))
        assert not result.success
        assert result.error_code == "ARTIFACT_ERROR"
        assert not sink.has("page-1")

    def test_write_error_is_wrapped_and_cleaned_up(self, horizontal_page):
        sink = Mock()
        sink.write.side_effect = [None, OSError("read-only")]
        service = DocstrumService(build_config(k=4), renderer=OpenCVRenderer(), sink=sink)
        result = service.process(PageInput.from_components("page-1", horizontal_page))
        assert result.error_code == "ARTIFACT_ERROR"
        sink.discard.assert_called_once_with("page-1", ["nn_angles", "docstrum"])

    def test_single_component_page_fails(self):
        result = DocstrumService().process(PageInput.from_components("solo", [glyph(1, 10, 10)]))
        assert not result.success
        assert result.estimate is None
        assert result.error_code == "NUMERIC_ERROR"

    def test_renderer_failure_fails_page(self, horizontal_page):
        renderer = Mock()
        renderer.render.side_effect = RuntimeError("no canvas")
        service = DocstrumService(build_config(k=4), renderer=renderer)
        result = service.process(PageInput.from_components("page-1", horizontal_page))
        assert not result.success
        assert result.error_code == "ARTIFACT_ERROR"
        renderer.render.assert_called_once()

    def test_events_follow_stage_order(self, horizontal_page):
        seen = []
        service = DocstrumService(build_config(k=4))
        service.subscribe_to_events(lambda event: seen.append(event.stage))
        service.process(PageInput.from_components("page-1", horizontal_page))
        assert seen == [
            "start",
            "extract_components",
            "filter_components",
            "compute_neighbors",
            "fold_angles",
            "build_histogram",
            "fit_curve",
            "extract_critical_points",
            "estimate_spacing",
            "report",
            "complete",
        ]

    def test_run_reaches_reported(self, horizontal_page):
        ctx = DocstrumService(build_config(k=4)).run(
            PageInput.from_components("page-1", horizontal_page)
        )
        assert ctx.stage is PipelineStage.REPORTED
        assert ctx.histogram.total == pytest.approx(1.0)
