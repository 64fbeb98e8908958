"""Contact form intake and message storage API."""
