"""Training flow authoring, versioning and generation engine."""

__version__ = "1.0.0"
