"""Memogram Application Package.

A Telegram bot that stores incoming chat messages as notes in a self-hosted
Memos instance and lets the user browse them through inline keyboards.

The application follows a modular architecture with separate concerns for:
- Bot handlers, message normalization and Markdown rendering
- Album deduplication and inline keyboard navigation
- Memos and Telegram API clients
- Album state storage
"""
