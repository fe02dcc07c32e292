"""File names of an experiment folder's inputs and outputs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ExperimentFiles:
    """Conventional paths inside one experiment folder.

    The experiment id is the folder's name; every file is prefixed with it.

    Attributes:
        folder: The experiment folder.
        marker: Neurite marker label used in neurite file names.
    """

    folder: Path
    marker: str = "MAP2"

    @property
    def experiment_id(self) -> str:
        return Path(self.folder).resolve().name

    def _path(self, suffix: str) -> Path:
        return Path(self.folder) / f"{self.experiment_id}_{suffix}"

    @property
    def sequence_file(self) -> Path:
        return self._path("Image_Capture.txt")

    @property
    def feature_table(self) -> Path:
        return self._path(f"{self.marker}_Neurite_Analysis.csv")

    @property
    def neurite_report(self) -> Path:
        return self._path(f"{self.marker}_Neurite_Degeneration.xlsx")

    @property
    def count_table(self) -> Path:
        return self._path("Nuclei_Count.csv")

    @property
    def count_report(self) -> Path:
        return self._path("Nuclei_Count.xlsx")
