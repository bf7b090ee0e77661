"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Table, bucket and blob prefix defaults
- exceptions: Custom exception hierarchy
- ingress: HTTP request parsing and storage client construction
"""
