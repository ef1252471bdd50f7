"""External integration services package.

Contains the Memos REST client, the Telegram Bot API wrapper, album state
storage and MIME type resolution for downloaded media.
"""
