"""Command line interface for confprops."""
