"""Services for the Moderation Desk API."""
