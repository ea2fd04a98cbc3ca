"""API Resilience Implementations.

Contains the executor that re-authenticates once when a bearer token is
rejected and re-issues the original request.
Bounded Context: API Resilience
"""
