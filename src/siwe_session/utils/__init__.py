"""Transport, validation and configuration helpers for the session core."""
