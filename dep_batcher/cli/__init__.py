"""Command line interface for DepBatcher."""
