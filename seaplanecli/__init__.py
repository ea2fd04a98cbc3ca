"""seaplanecli: command line client and SDK for the Seaplane platform."""

__version__ = "0.6.0"
