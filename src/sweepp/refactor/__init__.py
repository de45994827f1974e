"""Source rewriting."""
