"""
Bot Handlers Package

This package contains the Telegram handlers:
- The /cah command with its subcommands
- Callback handlers for the card picker and judge buttons
- Error handlers for exception management
"""
