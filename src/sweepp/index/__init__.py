"""Source discovery and parsing."""
