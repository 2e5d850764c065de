"""petdash - home dashboard AI content aggregation for pet care."""

__version__ = "0.1.0"
