"""WalkReach: find catalogue facilities within walking reach of an address."""

__version__ = "0.1.0"
