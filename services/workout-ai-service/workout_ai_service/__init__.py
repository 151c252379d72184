"""AI workout generation and the daily workout email."""
