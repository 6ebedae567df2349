from . import assignments, health, tickets, trips

__all__ = ["assignments", "health", "tickets", "trips"]
