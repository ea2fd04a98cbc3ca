"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the application to the outside world (HTTP APIs, configuration
files, the terminal) by implementing the interfaces defined in the domain
layer.
"""
