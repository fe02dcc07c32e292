"""ImageScanner — find source images in an experiment directory."""

from __future__ import annotations

from pathlib import Path


class ImageScanner:
    """Scans a directory for TIFF files."""

    TIFF_EXTENSIONS = {".tif", ".tiff"}

    def scan(self, path: Path, recursive: bool = False) -> list[Path]:
        """List source images in ``path``, sorted by filename.

        Args:
            path: Directory to scan.
            recursive: Also descend into subdirectories.

        Returns:
            Image paths sorted by file name, then by full path.

        Raises:
            FileNotFoundError: If path does not exist.
            ValueError: If path is not a directory or holds no TIFF files.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Source path does not exist: {path}")
        if not path.is_dir():
            raise ValueError(f"Source path is not a directory: {path}")

        pattern = "**/*" if recursive else "*"
        found = [
            p for p in path.glob(pattern)
            if p.is_file()
            and p.suffix.lower() in self.TIFF_EXTENSIONS
            and not p.name.startswith(".")
        ]
        if not found:
            raise ValueError(f"No TIFF files found in: {path}")
        return sorted(found, key=lambda p: (p.name, str(p)))
