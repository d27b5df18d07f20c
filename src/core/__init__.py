"""Core domain package for switchboard.

Core contains the relay, verification and moderation logic without any
Telegram or storage-specific code, keeping the business logic portable.
"""
