"""Domain Layer: value objects, errors, interfaces and events.

Has no dependency on the infrastructure layer.
"""
