"""Terminal frontend."""
