"""
Command-line tools for the schema registry.
"""
