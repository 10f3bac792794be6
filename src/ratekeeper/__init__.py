"""
Ratekeeper - daily FX rate aggregation service.
"""

__version__ = "1.0.0"
