"""HTTP interface for The Goat."""
