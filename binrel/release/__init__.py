"""Release pipeline."""
