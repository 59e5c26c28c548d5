"""HTTP API for the mosaic service."""
