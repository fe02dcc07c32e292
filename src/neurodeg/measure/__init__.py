"""neurodeg Measure — skeleton statistics, particle analysis and batch driver."""

from neurodeg.measure.batch import BatchAnalyzer, BatchResult, analyze_image
from neurodeg.measure.features import (
    FeatureExtractor,
    attachment_mask,
    count_attachment_points,
)
from neurodeg.measure.particle_analyzer import (
    Particle,
    ParticleAnalysisResult,
    ParticleAnalyzer,
    circularity,
    traced_perimeter,
)
from neurodeg.measure.skeleton import analyze_skeleton, summarize_skeleton

__all__ = [
    "BatchAnalyzer",
    "BatchResult",
    "FeatureExtractor",
    "Particle",
    "ParticleAnalysisResult",
    "ParticleAnalyzer",
    "analyze_image",
    "analyze_skeleton",
    "attachment_mask",
    "circularity",
    "count_attachment_points",
    "summarize_skeleton",
]
