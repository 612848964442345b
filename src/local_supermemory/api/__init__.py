"""HTTP surface of the memory store."""
