"""Session state machine, timer engine and finalizer."""
