"""adbridge: resilient HTTP execution for ad-platform APIs."""

__version__ = "0.4.0"
