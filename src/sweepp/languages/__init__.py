"""Language-specific extraction of imports, exports and declarations."""
