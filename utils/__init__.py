"""Numeric helpers, synthetic data and the pipeline runner."""
