"""Game domain services: dice, movement, rooms and turns.

This package contains the pure(ish) session logic that the Socket.IO
router calls into, keeping transport concerns separated from core game
mechanics.
"""
