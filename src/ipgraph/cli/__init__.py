"""Developer inspection CLI for relationship graphs."""
