"""taskplan - dependency-aware task scheduling with reminders."""

__version__ = "0.1.0"
