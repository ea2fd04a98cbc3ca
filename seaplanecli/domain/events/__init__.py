"""Domain Event definitions.

Represents significant occurrences (API attempts, token refreshes) that
callers may observe through an event sink.
"""
