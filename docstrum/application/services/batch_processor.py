"""Batch processor for analysing multiple pages."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ...config import SUPPORTED_IMAGE_EXTENSIONS
from ...domain.entities.page import PageInput
from ...domain.entities.result import ImageResult
from ..ports.event_publisher import EventPublisher, ProcessingEvent, SimpleEventPublisher
from .docstrum_service import DocstrumService

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Result of batch processing."""
    total: int
    successful: int
    failed: int
    processing_time_ms: float
    results: list[ImageResult]

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self.total == 0:
            return 0.0
        return self.successful / self.total

    @property
    def failures(self) -> list[ImageResult]:
        return [r for r in self.results if not r.success]


class BatchProcessor:
    """Process multiple pages; one failing page never aborts the batch."""

    def __init__(
        self,
        service: DocstrumService,
        max_workers: int = 1,
        event_publisher: EventPublisher | None = None
    ):
        self._service = service
        self._max_workers = max(1, max_workers)
        self._events = event_publisher or SimpleEventPublisher()

    def process_pages(
        self,
        pages: list[PageInput],
        progress_callback: Callable[[int, int, str], None] | None = None
    ) -> BatchResult:
        """Process multiple pages.

        Pages are independent; with ``max_workers > 1`` they run on a
        thread pool. Results keep the input order.

        Args:
            pages: Pages to analyse
            progress_callback: Optional callback(current, total, message)

        Returns:
            Batch processing result
        """
        start_time = time.time()
        total = len(pages)

        self._events.publish(ProcessingEvent(
            stage="batch_start",
            message=f"Starting batch of {total} pages",
            progress=0.0
        ))

        def run(index: int, page: PageInput) -> ImageResult:
            if progress_callback:
                progress_callback(index, total, f"Processing {page.name}")
            self._events.publish(ProcessingEvent(
                stage="processing",
                message=f"Processing {page.name}",
                progress=(index - 1) / total,
                page_name=page.name
            ))
            return self._process_one(page)

        if self._max_workers == 1 or total <= 1:
            results = [run(i, page) for i, page in enumerate(pages, 1)]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="docstrum-page") as pool:
                futures = [pool.submit(run, i, page) for i, page in enumerate(pages, 1)]
                results = [future.result() for future in futures]

        successful = sum(1 for r in results if r.success)
        failed = total - successful
        for result in results:
            if not result.success:
                logger.error(f"Failed {result.name}: {result.error_message}")

        elapsed = (time.time() - start_time) * 1000

        self._events.publish(ProcessingEvent(
            stage="batch_complete",
            message=f"Batch complete: {successful}/{total} succeeded",
            progress=1.0
        ))

        return BatchResult(
            total=total,
            successful=successful,
            failed=failed,
            processing_time_ms=elapsed,
            results=results
        )

    def _process_one(self, page: PageInput) -> ImageResult:
        try:
            return self._service.process(page)
        except Exception as e:
            logger.exception(f"Error processing {page.name}")
            return ImageResult.failure(page.name, f"{type(e).__name__}: {e}")

    def process_directory(
        self,
        input_dir: Path,
        extensions: tuple[str, ...] = SUPPORTED_IMAGE_EXTENSIONS,
        **kwargs
    ) -> BatchResult:
        """Process all images in directory.

        Args:
            input_dir: Input directory
            extensions: File extensions to process
            **kwargs: Additional args for process_pages

        Returns:
            Batch processing result
        """
        files = [
            f for f in input_dir.iterdir()
            if f.is_file() and f.suffix.lower() in extensions
        ]
        files.sort()

        return self.process_pages([PageInput.from_file(f) for f in files], **kwargs)

    def subscribe_to_events(self, callback: Callable[[ProcessingEvent], None]) -> None:
        """Subscribe to processing events."""
        self._events.subscribe(callback)
