"""
Game Engine Package

This package contains the card game engine:
- Source deck, card piles and hands
- Per-channel game sessions and the round state machine
- Simulated players for solo mode
- Scoring and round resolution
- The game manager used by the bot handlers
"""
