"""Concrete adapters for the interfaces in ``samplegraph.interfaces``."""
