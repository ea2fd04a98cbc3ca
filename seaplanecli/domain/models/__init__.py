"""Domain models for identity, requests and each resource family."""
