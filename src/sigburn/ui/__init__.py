"""User-facing layers: shared workflows and the command-line interface."""
