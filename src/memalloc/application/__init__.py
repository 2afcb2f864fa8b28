"""Application layer: services that drive the domain."""
