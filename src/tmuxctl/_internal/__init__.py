"""Internal helpers for tmuxctl, not part of the public API."""
