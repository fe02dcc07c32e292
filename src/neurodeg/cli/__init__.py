"""neurodeg CLI — command-line interface."""
