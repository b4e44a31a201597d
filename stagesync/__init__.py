"""Real-time state synchronization client for Stagetimer.io rooms."""

__version__ = "0.1.0"
