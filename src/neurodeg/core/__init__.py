"""neurodeg core — data model, configuration and exceptions."""

from neurodeg.core.config import AnalysisConfig
from neurodeg.core.exceptions import (
    AnalysisError,
    CohortJoinError,
    FatalBatchError,
    ImageFormatError,
    MetadataHeaderError,
)
from neurodeg.core.models import (
    NEURITE_ROLE,
    SOMA_ROLE,
    BinaryMask,
    CalibratedRaster,
    FeatureRecord,
    MaskKind,
    PipelineContext,
    RasterStack,
    SkeletonSummary,
)

__all__ = [
    "AnalysisConfig",
    "AnalysisError",
    "BinaryMask",
    "CalibratedRaster",
    "CohortJoinError",
    "FatalBatchError",
    "FeatureRecord",
    "ImageFormatError",
    "MaskKind",
    "MetadataHeaderError",
    "NEURITE_ROLE",
    "PipelineContext",
    "RasterStack",
    "SOMA_ROLE",
    "SkeletonSummary",
]
