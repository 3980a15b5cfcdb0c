"""Host probes, one module per pipeline stage."""
