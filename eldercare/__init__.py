"""ElderCare: senior-living room search, comparison and rating service."""

__version__ = "0.1.0"
