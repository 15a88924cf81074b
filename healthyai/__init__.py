"""HealthyAI — health assistant chat engine."""

__version__ = "0.1.0"
