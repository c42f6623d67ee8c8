"""Graph state persistence."""
