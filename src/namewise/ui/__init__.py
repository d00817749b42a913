"""Terminal rendering for Namewise."""
