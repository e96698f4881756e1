"""Command implementations for the gox CLI."""
