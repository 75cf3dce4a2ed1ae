"""Command line interface for the Schema Platform."""
