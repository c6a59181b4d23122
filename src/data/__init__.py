"""League data loading, baselines and normalization."""
