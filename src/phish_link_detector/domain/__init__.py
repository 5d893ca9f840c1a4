"""Domain models for link analysis."""
