"""
Common - Shared utilities and pure functions.

- logging/     - Structured logging configuration
- types.py     - SampleBuffer and other value types
- primitives/  - Pure math functions (numpy/scipy only)
"""
