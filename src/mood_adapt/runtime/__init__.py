"""Host-side runtime helpers."""
