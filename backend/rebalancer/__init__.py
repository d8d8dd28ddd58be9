"""Multi-outlet inventory rebalancing engine."""

__version__ = "1.0.0"
