"""Summary statistics, distribution export and narrative text."""
