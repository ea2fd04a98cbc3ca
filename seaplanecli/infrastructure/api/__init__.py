"""Resource family implementations and the request builder.

Each family knows its request shapes, endpoint layout and wire format,
implementing the `RequestFamily` interface from the domain layer.
"""
