"""Digital wallet services: clients, accounts, transfers, their events and storage."""

__version__ = "0.1.0"