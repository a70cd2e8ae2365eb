"""
Tests Package

This package contains the test files for the card game bot:
- Unit tests for piles, hands, prompts and player ids
- Round engine and solo mode state machine tests
- Game manager tests (sessions, locking, round complete push)
- Handler tests with dummy Telegram objects

Run tests with: pytest tests/
"""
