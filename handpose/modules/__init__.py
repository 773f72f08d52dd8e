"""Processing stages for the hand pose pipeline."""
