"""Content-addressed storage access (pinning API + HTTP gateway)."""
