"""Season scheduling engine: round-robin pairing, slot assignment and lifecycle."""
