"""NFL matchup Monte Carlo simulator."""
