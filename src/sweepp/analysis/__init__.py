"""Usage analysis: symbol collection, import cleanup, dead-code detection."""
