"""Schema migrations for the archive database."""
