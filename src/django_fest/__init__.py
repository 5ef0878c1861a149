"""Event-management apps for a university fest: events, registrations, teams, and merchandise."""

__version__ = "0.1.0"
