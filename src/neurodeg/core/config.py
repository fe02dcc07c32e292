"""AnalysisConfig — recognized pipeline options and their YAML form.

Requires pyyaml for ``to_yaml``/``from_yaml``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

AUTO_THRESHOLD_METHODS = frozenset(
    {"huang", "max_entropy", "otsu", "li", "triangle", "yen"}
)


@dataclass(frozen=True)
class AnalysisConfig:
    """Options for the segmentation, feature extraction and cohort stages.

    Areas are in calibrated units squared (e.g. µm²); filter radii and
    sigmas are in pixels. Fixed threshold values are on the 8-bit scale of
    the preprocessed image.
    """

    fixed_threshold: bool = False
    soma_threshold: float | None = None
    neurite_threshold: float | None = None
    soma_threshold_method: str = "max_entropy"
    neurite_threshold_method: str = "huang"
    soma_channel: int = 1
    neurite_channel: int = 2
    neurite_marker: str = "MAP2"
    save_soma_mask: bool = False
    save_neurite_mask: bool = False
    save_network_mask: bool = False
    soma_min_area: float = 20.0
    neurite_min_area: float = 0.20
    fragment_min_area: float = 0.0202
    fragment_max_area: float = 0.255
    fragment_min_circularity: float = 0.2
    fragment_max_circularity: float = 1.0
    background_radius: float = 50.0
    clahe_clip_limit: float = 0.01
    soma_blur_sigma: float = 2.0
    neurite_sigmas: tuple[float, ...] = (1.0, 2.0, 3.0)
    reference_treatment: str = "Null"

    def __post_init__(self) -> None:
        """Validate parameters."""
        if self.fixed_threshold:
            for name in ("soma_threshold", "neurite_threshold"):
                value = getattr(self, name)
                if value is None:
                    raise ValueError(f"{name} is required when fixed_threshold is set")
                if not (0 <= value <= 255):
                    raise ValueError(f"{name} must be between 0 and 255, got {value}")
        for name in ("soma_threshold_method", "neurite_threshold_method"):
            method = getattr(self, name)
            if method not in AUTO_THRESHOLD_METHODS:
                raise ValueError(
                    f"Unknown threshold method {method!r} for {name}. "
                    f"Supported: {sorted(AUTO_THRESHOLD_METHODS)}"
                )
        if self.soma_channel < 1 or self.neurite_channel < 1:
            raise ValueError("Channel indices are 1-based and must be >= 1")
        if self.soma_channel == self.neurite_channel:
            raise ValueError(
                f"soma_channel and neurite_channel must differ, both are {self.soma_channel}"
            )
        if not self.neurite_marker:
            raise ValueError("neurite_marker must not be empty")
        for name in ("soma_min_area", "neurite_min_area", "fragment_min_area"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.fragment_max_area < self.fragment_min_area:
            raise ValueError("fragment_max_area must be >= fragment_min_area")
        if not (
            0 <= self.fragment_min_circularity
            <= self.fragment_max_circularity <= 1
        ):
            raise ValueError("Fragment circularity band must satisfy 0 <= min <= max <= 1")
        if self.background_radius <= 0:
            raise ValueError(f"background_radius must be > 0, got {self.background_radius}")
        if not self.neurite_sigmas or any(s <= 0 for s in self.neurite_sigmas):
            raise ValueError("neurite_sigmas must be a non-empty list of positive values")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict suitable for YAML."""
        data = asdict(self)
        data["neurite_sigmas"] = list(self.neurite_sigmas)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisConfig:
        """Build a config from a dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")
        kwargs = dict(data)
        if "neurite_sigmas" in kwargs:
            kwargs["neurite_sigmas"] = tuple(float(s) for s in kwargs["neurite_sigmas"])
        return cls(**kwargs)

    def to_yaml(self, path: Path) -> None:
        """Serialize this config to a YAML file."""
        yaml = _require_yaml()
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, path: Path) -> AnalysisConfig:
        """Load a config from a YAML file. Missing keys take their defaults."""
        yaml = _require_yaml()
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config file {path}: expected a mapping")
        return cls.from_dict(data)


def _require_yaml() -> Any:
    """Import and return the yaml module, or raise a helpful error."""
    try:
        import yaml

        return yaml
    except ImportError:
        raise ImportError(
            "pyyaml is required for configuration files. "
            "Install it with: pip install pyyaml"
        ) from None
