"""Game domain services: board generation, turn resolution, matchmaking, bot, timers.

This package contains pure(ish) domain logic that should be imported by
socket handlers and HTTP routes, keeping transport concerns separated
from core game mechanics.
"""
