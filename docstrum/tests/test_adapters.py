"""Tests for the OpenCV and Pillow adapters."""

import numpy as np
import pytest
from PIL import Image

from docstrum.adapters.rendering import OpenCVRenderer
from docstrum.adapters.segmentation import OpenCVComponentExtractor
from docstrum.adapters.storage import DirectoryArtifactSink
from docstrum.application.ports.artifacts import RenderRequest
from docstrum.application.ports.component_extractor import ComponentExtractor
from docstrum.application.services.docstrum_service import DocstrumService
from docstrum.domain.entities.page import PageInput
from docstrum.domain.value_objects.config import build_config
from docstrum.exceptions import (
    ArtifactError,
    InvalidConfigurationError,
    UpstreamSegmentationError,
)


class TestOpenCVComponentExtractor:
    """Binarization and labelling."""

    def test_implements_port(self):
        assert isinstance(OpenCVComponentExtractor(), ComponentExtractor)

    @pytest.mark.parametrize("method", ["otsu", "adaptive"])
    def test_finds_every_glyph(self, raster_page, method):
        components = OpenCVComponentExtractor(method=method).extract(
            PageInput.from_array("synthetic", raster_page)
        )
        assert len(components) == 90
        assert len({cc.label for cc in components}) == 90
        assert all(cc.pixel_count == 16 for cc in components)

    def test_centroids_and_bounds(self):
        page = np.full((40, 60), 255, dtype=np.uint8)
        page[10:14, 20:24] = 0
        components = OpenCVComponentExtractor(method="otsu").extract(
            PageInput.from_array("one", page)
        )
        assert len(components) == 1
        cc = components[0]
        assert cc.centroid.x == pytest.approx(21.5)
        assert cc.centroid.y == pytest.approx(11.5)
        assert (cc.bounds.min_x, cc.bounds.min_y, cc.bounds.width, cc.bounds.height) == (20, 10, 4, 4)

    def test_rgb_input(self, raster_page):
        rgb = np.stack([raster_page] * 3, axis=-1)
        components = OpenCVComponentExtractor(method="otsu").extract(
            PageInput.from_array("rgb", rgb)
        )
        assert len(components) == 90

    def test_reads_files(self, tmp_path, raster_page):
        path = tmp_path / "scan.png"
        Image.fromarray(raster_page).save(path)
        page = PageInput.from_file(path)
        assert page.name == "scan"
        assert len(OpenCVComponentExtractor(method="otsu").extract(page)) == 90

    def test_missing_file(self, tmp_path):
        page = PageInput.from_file(tmp_path / "missing.png")
        with pytest.raises(UpstreamSegmentationError) as exc_info:
            OpenCVComponentExtractor().extract(page)
        assert exc_info.value.page_name == "missing"

    def test_too_many_components(self, raster_page):
        extractor = OpenCVComponentExtractor(method="otsu", max_components=10)
        with pytest.raises(UpstreamSegmentationError):
            extractor.extract(PageInput.from_array("busy", raster_page))

    @pytest.mark.parametrize("kwargs", [
        {"method": "sauvola"},
        {"block_size": 4},
        {"connectivity": 6},
    ])
    def test_invalid_settings(self, kwargs):
        with pytest.raises(InvalidConfigurationError):
            OpenCVComponentExtractor(**kwargs)

    def test_end_to_end(self, raster_page):
        service = DocstrumService(build_config(k=4), extractor=OpenCVComponentExtractor(method="otsu"))
        result = service.process(PageInput.from_array("synthetic", raster_page))
        assert result.success
        assert abs(result.estimate.skew_degrees) < 1.5
        assert result.estimate.component_count == 90


class TestOpenCVRenderer:
    """Diagnostic rasters."""

    @pytest.fixture
    def request_for(self, horizontal_page):
        def build(page_size=None):
            ctx = DocstrumService(build_config(k=4)).run(
                PageInput.from_components("page", horizontal_page)
            )
            return RenderRequest(
                page_name="page",
                components=ctx.components,
                neighbor_table=ctx.neighbor_table,
                histogram=ctx.histogram,
                polynomial=ctx.polynomial,
                estimate=ctx.estimate,
                page_size=page_size
            )
        return build

    def test_render_shapes(self, request_for):
        rasters = OpenCVRenderer(plot_size=200).render(request_for())
        assert list(rasters) == ["nn_angles", "docstrum", "neighbor_overlay"]
        assert rasters["nn_angles"].shape == (200, 200)
        assert rasters["docstrum"].shape == (200, 200)
        for raster in rasters.values():
            assert raster.dtype == np.uint8
            assert (raster < 255).any()

    def test_overlay_uses_page_size(self, request_for):
        overlay = OpenCVRenderer().plot_overlay(request_for(page_size=(500, 300)))
        assert overlay.shape == (300, 500)

    def test_overlay_fits_components(self, request_for, horizontal_page):
        overlay = OpenCVRenderer().plot_overlay(request_for())
        max_y = max(cc.bounds.max_y for cc in horizontal_page)
        max_x = max(cc.bounds.max_x for cc in horizontal_page)
        assert overlay.shape == (int(np.ceil(max_y)), int(np.ceil(max_x)))


class TestDirectoryArtifactSink:
    """PNG output."""

    def test_write(self, tmp_path):
        sink = DirectoryArtifactSink(tmp_path / "out")
        raster = np.zeros((10, 20), dtype=np.uint8)
        sink.write("page-1", "docstrum", raster)
        path = tmp_path / "out" / "page-1" / "docstrum.png"
        assert sink.path_for("page-1", "docstrum") == path
        with Image.open(path) as img:
            assert img.size == (20, 10)

    def test_discard(self, tmp_path):
        sink = DirectoryArtifactSink(tmp_path)
        raster = np.zeros((4, 4), dtype=np.uint8)
        sink.write("page-1", "nn_angles", raster)
        sink.write("page-1", "docstrum", raster)
        sink.discard("page-1", ["nn_angles", "docstrum", "neighbor_overlay"])
        assert not (tmp_path / "page-1").exists()

    def test_discard_keeps_other_files(self, tmp_path):
        sink = DirectoryArtifactSink(tmp_path)
        sink.write("page-1", "docstrum", np.zeros((4, 4), dtype=np.uint8))
        (tmp_path / "page-1" / "notes.txt").write_text("keep")
        sink.discard("page-1", ["docstrum"])
        assert not sink.path_for("page-1", "docstrum").exists()
        assert (tmp_path / "page-1" / "notes.txt").exists()

    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        sink = DirectoryArtifactSink(blocker)
        with pytest.raises(ArtifactError) as exc_info:
            sink.write("page-1", "docstrum", np.zeros((2, 2), dtype=np.uint8))
        assert exc_info.value.artifact_name == "docstrum"
