"""NeuriteSegmenter — ridge-enhanced neurite mask and derived composites."""

from __future__ import annotations

import logging

import numpy as np

from neurodeg.core.config import AnalysisConfig
from neurodeg.core.models import BinaryMask, CalibratedRaster, MaskKind
from neurodeg.segment.components import filter_components, min_area_pixels
from neurodeg.segment.thresholds import binarize

logger = logging.getLogger(__name__)


class NeuriteSegmenter:
    """Segment neurites from the neurite channel.

    The channel is enhanced with a Frangi vesselness filter at each
    configured scale, the per-scale responses are max-projected to one
    plane, thresholded, and cleared of sub-resolution speckle.

    Args:
        config: Analysis options (scales, threshold policy, speckle floor).
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self._config = config or AnalysisConfig()

    def enhance(self, raster: CalibratedRaster) -> np.ndarray:
        """Return the single-plane ridge response of the neurite channel."""
        from skimage.exposure import rescale_intensity
        from skimage.filters import frangi

        image = raster.data.astype(np.float64)
        if image.max() <= image.min():
            return np.zeros(image.shape, dtype=np.float64)
        image = rescale_intensity(image, out_range=(0.0, 1.0))

        stack = np.stack([
            frangi(image, sigmas=[sigma], black_ridges=False)
            for sigma in self._config.neurite_sigmas
        ])
        return np.nan_to_num(stack.max(axis=0))

    def segment(self, raster: CalibratedRaster) -> BinaryMask:
        """Produce the neurite mask for one image.

        The mask carries ``raster``'s calibration, captured before filtering.
        """
        cfg = self._config
        response = self.enhance(raster)

        fixed = cfg.neurite_threshold if cfg.fixed_threshold else None
        binary, level = binarize(response, cfg.neurite_threshold_method, fixed)
        logger.debug("Neurite threshold %.1f", level)

        floor = min_area_pixels(cfg.neurite_min_area, raster.pixel_area)
        binary = filter_components(binary, floor, connectivity=2)

        return BinaryMask.from_raster(binary, raster, MaskKind.NEURITE)


def derive_composites(
    soma: BinaryMask, neurite: BinaryMask,
) -> tuple[BinaryMask, BinaryMask]:
    """Build the neurite-without-soma and neuronal-network masks.

    Returns:
        Tuple of (neurite minus soma, soma union neurite-without-soma).
    """
    without_soma = neurite.subtract(soma, MaskKind.NEURITE_WITHOUT_SOMA)
    network = soma.union(without_soma, MaskKind.NEURONAL_NETWORK)
    return without_soma, network
