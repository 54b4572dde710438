"""Task-level entry points built on the pipeline."""
