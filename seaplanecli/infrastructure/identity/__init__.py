"""Identity service client (API key to bearer token exchange)."""
