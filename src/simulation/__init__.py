"""Matchup scoring and Monte Carlo simulation."""
