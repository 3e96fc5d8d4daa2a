"""Core Application Layer: Orchestrates use cases and application logic.

Connects the CLI entry point with the cache store through interfaces.
"""
