"""neurodeg Segment — soma and neurite segmentation."""

from __future__ import annotations

from neurodeg.core.config import AnalysisConfig
from neurodeg.core.models import NEURITE_ROLE, SOMA_ROLE, PipelineContext, RasterStack
from neurodeg.segment.neurite import NeuriteSegmenter, derive_composites
from neurodeg.segment.soma import SomaSegmenter
from neurodeg.segment.thresholds import SUPPORTED_METHODS, binarize, compute_threshold

__all__ = [
    "NeuriteSegmenter",
    "SUPPORTED_METHODS",
    "SomaSegmenter",
    "binarize",
    "compute_threshold",
    "derive_composites",
    "segment_image",
]


def segment_image(stack: RasterStack, config: AnalysisConfig) -> PipelineContext:
    """Run soma and neurite segmentation for one image.

    Args:
        stack: The image's role-tagged rasters.
        config: Analysis options.

    Returns:
        PipelineContext holding the soma, neurite, neurite-without-soma
        and neuronal-network masks.
    """
    soma = SomaSegmenter(config).segment(stack.raster(SOMA_ROLE))
    neurite = NeuriteSegmenter(config).segment(stack.raster(NEURITE_ROLE))
    without_soma, network = derive_composites(soma, neurite)
    return PipelineContext(
        filename=stack.filename,
        soma=soma,
        neurite=neurite,
        neurite_without_soma=without_soma,
        network=network,
    )
