"""HTTP transport built on httpx, and mapping of error responses."""
