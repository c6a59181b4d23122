"""Team and situation models."""
