"""Telegram bot implementation package.

Contains all Telegram bot specific functionality: handlers, message parsing
and formatting, the memo creation pipeline, album deduplication, inline
keyboard payloads and memo browsing views.
"""
