"""Coffee-shop POS order & pricing domain."""
