"""openwork - host backend that supervises the opencode engine."""

__version__ = "0.1.0"
