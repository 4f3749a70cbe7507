"""Pure budget computations (no I/O, no authorization)."""
