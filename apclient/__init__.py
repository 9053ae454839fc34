"""Client back end for a simulated source-routed drone network."""

__version__ = "0.1.0"
__all__ = ["backend", "commands", "database", "graph", "ids", "packet", "router"]