"""BatchAnalyzer — run the image pipeline over a directory of micrographs."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from neurodeg.core.config import AnalysisConfig
from neurodeg.core.exceptions import FatalBatchError
from neurodeg.core.models import FeatureRecord
from neurodeg.io.feature_table import FeatureTableWriter
from neurodeg.io.masks import save_audit_masks
from neurodeg.io.scanner import ImageScanner
from neurodeg.io.tiff import load_image, validate_image
from neurodeg.measure.features import FeatureExtractor
from neurodeg.segment import segment_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    """Result of a batch analysis run.

    Attributes:
        records: FeatureRecords in filename order.
        images_processed: Images that produced a record.
        images_failed: Images whose analysis raised a non-fatal error.
        images_skipped: Images never started because the run was cancelled.
        cancelled: Whether cancellation stopped the run early.
        elapsed_seconds: Wall-clock time in seconds.
        warnings: List of warning messages.
    """

    records: list[FeatureRecord]
    images_processed: int
    images_failed: int
    images_skipped: int
    cancelled: bool
    elapsed_seconds: float
    warnings: list[str] = field(default_factory=list)


def analyze_image(
    path: Path, config: AnalysisConfig, mask_dir: Path | None = None,
) -> FeatureRecord:
    """Load, segment and measure one micrograph.

    Args:
        path: Source TIFF.
        config: Analysis options.
        mask_dir: Where enabled audit masks are written, if anywhere.

    Returns:
        The image's FeatureRecord.
    """
    stack = load_image(path, config)
    context = segment_image(stack, config)
    record = FeatureExtractor(config).extract(context)
    if mask_dir is not None:
        save_audit_masks(context, mask_dir, config)
    return record


class BatchAnalyzer:
    """Analyze every TIFF in a directory and stream rows to a feature table.

    Every image is validated before any pixels are processed, so a
    malformed file aborts the run without writing output. Images may run
    on a thread pool; results are still reduced and written in filename
    order by the calling thread.

    Args:
        config: Analysis options. Defaults to ``AnalysisConfig()``.
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self._config = config or AnalysisConfig()

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def run(
        self,
        source_dir: Path,
        output_csv: Path,
        mask_dir: Path | None = None,
        max_workers: int = 1,
        cancel_event: threading.Event | None = None,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> BatchResult:
        """Analyze all images under ``source_dir``.

        Args:
            source_dir: Directory containing the source TIFFs.
            output_csv: Feature table path. An existing file is replaced.
            mask_dir: Directory for audit masks. Defaults to a ``masks``
                folder beside the feature table when any mask save flag is set.
            max_workers: Number of images analyzed concurrently.
            cancel_event: When set, images not yet started are skipped.
            progress_callback: Optional callback(current, total, filename).

        Returns:
            BatchResult with the records and run statistics.

        Raises:
            FatalBatchError: If any image is structurally invalid.
            FileNotFoundError: If ``source_dir`` does not exist.
            ValueError: If ``source_dir`` holds no TIFF files or
                ``max_workers`` is below 1.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        cfg = self._config
        start = time.monotonic()
        cancel_event = cancel_event or threading.Event()

        images = ImageScanner().scan(Path(source_dir))
        for path in images:
            validate_image(path, cfg)
        logger.info("Validated %d images in %s", len(images), source_dir)

        if mask_dir is None and (
            cfg.save_soma_mask or cfg.save_neurite_mask or cfg.save_network_mask
        ):
            mask_dir = Path(output_csv).parent / "masks"

        records: list[FeatureRecord] = []
        warnings: list[str] = []
        failed = 0
        total = len(images)
        remaining = iter(images)
        pending: deque[tuple[Path, Future[FeatureRecord]]] = deque()

        def schedule(pool: ThreadPoolExecutor) -> None:
            while len(pending) < max_workers and not cancel_event.is_set():
                path = next(remaining, None)
                if path is None:
                    return
                pending.append((path, pool.submit(analyze_image, path, cfg, mask_dir)))

        with FeatureTableWriter(Path(output_csv)) as writer, \
                ThreadPoolExecutor(max_workers=max_workers) as pool:
            try:
                schedule(pool)
                done = 0
                while pending:
                    path, future = pending.popleft()
                    try:
                        record = future.result()
                    except FatalBatchError:
                        raise
                    except Exception as exc:
                        if isinstance(exc, (MemoryError, KeyboardInterrupt, SystemExit)):
                            raise
                        logger.warning(
                            "Analysis failed for %s: %s", path.name, exc, exc_info=True,
                        )
                        warnings.append(f"{path.name}: analysis failed: {exc}")
                        failed += 1
                    else:
                        writer.append(record)
                        records.append(record)
                        if record.nuclei_count == 0:
                            warnings.append(f"{path.name}: no nuclei detected")

                    done += 1
                    if progress_callback:
                        progress_callback(done, total, path.name)
                    schedule(pool)
            finally:
                for _, future in pending:
                    future.cancel()

        skipped = total - len(records) - failed
        if skipped:
            logger.info("Cancelled: %d of %d images not started", skipped, total)

        return BatchResult(
            records=records,
            images_processed=len(records),
            images_failed=failed,
            images_skipped=skipped,
            cancelled=skipped > 0,
            elapsed_seconds=round(time.monotonic() - start, 3),
            warnings=warnings,
        )
