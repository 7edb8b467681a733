"""Services that reach outside the process: helper commands, editors."""
