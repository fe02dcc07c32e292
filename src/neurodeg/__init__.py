"""neurodeg — neurite degeneration analysis of fluorescence micrographs."""

__version__ = "0.1.0"
