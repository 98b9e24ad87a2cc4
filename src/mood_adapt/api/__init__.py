"""HTTP host for the mood-adaptation core."""
