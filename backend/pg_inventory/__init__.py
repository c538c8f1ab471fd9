"""Room inventory and booking-lifecycle reconciliation engine for PG listings."""

__version__ = "1.0.0"
