"""Port adapters."""
