"""Interactive command shell for network appliances, with route types and a route manager."""

__version__ = "1.0.0"