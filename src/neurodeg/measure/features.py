"""FeatureExtractor — per-image morphometric features from segmentation masks."""

from __future__ import annotations

import logging

import numpy as np
from scipy import ndimage as ndi

from neurodeg.core.config import AnalysisConfig
from neurodeg.core.models import BinaryMask, FeatureRecord, MaskKind, PipelineContext
from neurodeg.measure.particle_analyzer import ParticleAnalyzer
from neurodeg.measure.skeleton import analyze_skeleton
from neurodeg.segment.components import CONNECTIVITY_8

logger = logging.getLogger(__name__)

_DILATION = np.ones((3, 3), dtype=bool)


def attachment_mask(soma: BinaryMask, neurite_without_soma: BinaryMask) -> BinaryMask:
    """Neurite pixels touching the one-pixel-dilated soma outline."""
    dilated = ndi.binary_dilation(soma.data, structure=_DILATION, iterations=1)
    grown = BinaryMask(
        data=dilated, kind=MaskKind.SOMA,
        pixel_size=soma.pixel_size, pixel_unit=soma.pixel_unit,
    )
    return grown.intersect(neurite_without_soma, MaskKind.ATTACHMENT)


def count_attachment_points(attachment: BinaryMask) -> int | None:
    """Count intensity maxima of the attachment image.

    The attachment mask is rendered as a 0/255 image and its 8-connected
    maximum plateaus are counted.

    Returns:
        The count, or None when the image is flat (all 0 or all 255) and
        has no maxima to select.
    """
    from skimage.morphology import local_maxima

    image = attachment.data.astype(np.uint8) * 255
    if image.min() == image.max():
        return None
    maxima = local_maxima(image, connectivity=2, allow_borders=True)
    _, n = ndi.label(maxima, structure=CONNECTIVITY_8)
    return int(n)


class FeatureExtractor:
    """Compute the FeatureRecord for one segmented image.

    Args:
        config: Analysis options (nucleus floor and fragment bands).
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self._config = config or AnalysisConfig()
        cfg = self._config
        self._nuclei = ParticleAnalyzer(min_area=cfg.soma_min_area, connectivity=1)
        self._neurites = ParticleAnalyzer(connectivity=2)
        self._fragments = ParticleAnalyzer(
            min_area=cfg.fragment_min_area,
            max_area=cfg.fragment_max_area,
            min_circularity=cfg.fragment_min_circularity,
            max_circularity=cfg.fragment_max_circularity,
            connectivity=2,
        )

    def extract(self, context: PipelineContext) -> FeatureRecord:
        """Measure all features of one image.

        Args:
            context: Masks produced by segmentation.

        Returns:
            FeatureRecord with calibrated areas and lengths.
        """
        skeleton = analyze_skeleton(context.neurite)

        nuclei = self._nuclei.analyze(context.soma)
        neurites = self._neurites.analyze(context.neurite)
        fragments = self._fragments.analyze(context.neurite, kind=MaskKind.FRAGMENT)

        attachment = attachment_mask(context.soma, context.neurite_without_soma)
        attachment_points = count_attachment_points(attachment)
        if attachment_points is None:
            logger.info("%s: no attachment maxima, recording NA", context.filename)

        return FeatureRecord(
            filename=context.filename,
            neurite_attachment_points=attachment_points,
            total_neurite_length=float(skeleton.total_length),
            max_branch_length=float(skeleton.max_branch_length),
            mean_branch_length=float(skeleton.mean_branch_length),
            end_points=int(skeleton.end_points),
            branches=int(skeleton.branches),
            trees=int(skeleton.trees),
            nuclei_count=nuclei.count,
            nuclei_total_area=nuclei.total_area,
            nuclei_average_area=nuclei.mean_area,
            total_neuron_area=context.network.area(),
            fragmented_neurite_area=fragments.total_area,
            total_neurite_area=neurites.total_area,
        )
