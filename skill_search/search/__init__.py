"""Search — full-text index, curated quality overlay, and ranked retrieval."""
