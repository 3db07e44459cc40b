"""Command macro engine for a DartMUD client: aliases, triggers, timers and variables."""

__version__ = "1.0.0"
