"""Command line interface."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from ...adapters.rendering import OpenCVRenderer
from ...adapters.segmentation import OpenCVComponentExtractor, THRESHOLD_METHODS
from ...adapters.storage import DirectoryArtifactSink
from ...application.services.batch_processor import BatchProcessor, BatchResult
from ...application.services.docstrum_service import DocstrumService
from ...config import (
    DEFAULT_ALPHA,
    DEFAULT_DEGREE,
    DEFAULT_K,
    DEFAULT_MIN_COMPONENT_AREA,
    DEFAULT_NBINS,
    DEFAULT_SCAN_STEP,
    DEFAULT_THRESHOLD_METHOD,
    RESULTS_FILE,
    SUPPORTED_IMAGE_EXTENSIONS,
)
from ...domain.entities.page import PageInput
from ...domain.value_objects.config import build_config
from ...exceptions import DocstrumError
from ...utils.env import resolve_log_level, setup_logging

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="docstrum",
        description="Estimate text skew and spacing of page images from nearest-neighbour statistics"
    )

    parser.add_argument("input", help="Input image or folder")
    parser.add_argument("-o", "--output", required=True, help="Output folder")

    # Neighbour search
    parser.add_argument(
        "-k", "--neighbors",
        type=int,
        default=DEFAULT_K,
        help=f"Nearest neighbours per component (default: {DEFAULT_K})"
    )
    parser.add_argument(
        "--min-area",
        type=float,
        default=DEFAULT_MIN_COMPONENT_AREA,
        help=f"Minimum bounding-box area of a component in px^2 (default: {DEFAULT_MIN_COMPONENT_AREA:g})"
    )
    parser.add_argument(
        "--neighbor-workers",
        type=int,
        default=1,
        metavar="N",
        help="Threads for neighbour search within a page (default: 1)"
    )

    # Histogram and fit
    fit_group = parser.add_argument_group("Histogram and fit options")
    fit_group.add_argument(
        "--nbins",
        type=int,
        default=DEFAULT_NBINS,
        help=f"Angle histogram bins over 180 degrees (default: {DEFAULT_NBINS})"
    )
    fit_group.add_argument(
        "--alpha",
        type=float,
        default=DEFAULT_ALPHA,
        help=f"Smoothing window as a fraction of the bins (default: {DEFAULT_ALPHA})"
    )
    fit_group.add_argument(
        "--degree",
        type=int,
        default=DEFAULT_DEGREE,
        help=f"Polynomial degree (default: {DEFAULT_DEGREE})"
    )
    fit_group.add_argument(
        "--scan-step",
        type=float,
        default=DEFAULT_SCAN_STEP,
        help=f"Critical point scan step in bins (default: {DEFAULT_SCAN_STEP:g})"
    )

    # Segmentation
    seg_group = parser.add_argument_group("Segmentation options")
    seg_group.add_argument(
        "--threshold",
        choices=THRESHOLD_METHODS,
        default=DEFAULT_THRESHOLD_METHOD,
        help=f"Binarization method (default: {DEFAULT_THRESHOLD_METHOD})"
    )

    # Output
    parser.add_argument(
        "--artifacts",
        action="store_true",
        help="Write diagnostic images for every page"
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=1,
        metavar="N",
        help="Pages processed in parallel (default: 1)"
    )
    parser.add_argument(
        "--log-file",
        help="Also write the log to this file"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser


def collect_pages(input_path: Path) -> list[PageInput]:
    """Pages for a single image or every supported image in a folder."""
    if input_path.is_file():
        return [PageInput.from_file(input_path)]
    files = [
        f for f in input_path.iterdir()
        if f.is_file() and f.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS
    ]
    files.sort()
    return [PageInput.from_file(f) for f in files]


def write_results(batch: BatchResult, output_path: Path) -> Path:
    """Dump per-page results as JSON."""
    results_file = output_path / RESULTS_FILE
    payload = {
        "total": batch.total,
        "successful": batch.successful,
        "failed": batch.failed,
        "processing_time_ms": round(batch.processing_time_ms, 3),
        "pages": [result.to_dict() for result in batch.results],
    }
    with open(results_file, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2)
    return results_file


def main(args: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    setup_logging(resolve_log_level(parsed.verbose), parsed.log_file)

    input_path = Path(parsed.input)
    output_path = Path(parsed.output)

    if not input_path.exists():
        logger.error(f"Input not found: {input_path}")
        return 1

    try:
        config = build_config(
            k=parsed.neighbors,
            nbins=parsed.nbins,
            alpha=parsed.alpha,
            degree=parsed.degree,
            scan_step=parsed.scan_step,
            min_component_area=parsed.min_area,
            neighbor_workers=parsed.neighbor_workers
        )
    except DocstrumError as e:
        logger.error(str(e))
        return 1

    pages = collect_pages(input_path)
    if not pages:
        logger.error("No image files found")
        return 1

    output_path.mkdir(parents=True, exist_ok=True)

    service = DocstrumService(
        config=config,
        extractor=OpenCVComponentExtractor(method=parsed.threshold),
        renderer=OpenCVRenderer() if parsed.artifacts else None,
        sink=DirectoryArtifactSink(output_path) if parsed.artifacts else None
    )
    processor = BatchProcessor(service, max_workers=parsed.workers)

    logger.info(f"Processing {len(pages)} page(s)...")
    try:
        batch = processor.process_pages(pages)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1

    results_file = write_results(batch, output_path)
    logger.info(f"Results written to {results_file}")

    # Summary
    logger.info("=" * 50)
    for result in batch.results:
        if result.success:
            spacing = result.estimate.spacing
            logger.info(
                f"  {result.name}: skew {result.estimate.skew_degrees:+.2f} deg"
                + (f", spacing {spacing:.1f} px" if spacing is not None else "")
            )

    if batch.failed:
        logger.warning(f"Completed: {batch.successful}/{batch.total} succeeded")
        for result in batch.failures:
            logger.error(f"  - {result.name}: {result.error_message}")
        return 1

    logger.info(f"Completed: All {batch.total} pages processed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
