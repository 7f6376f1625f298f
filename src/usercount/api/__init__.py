"""HTTP endpoint layer."""
