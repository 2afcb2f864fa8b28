"""Adapters: infrastructure bindings around the domain core."""
