"""
Core - Application infrastructure.

- config/      - Settings and YAML configuration
- adapters/    - Audio decode (loader) and WAV export
- errors.py    - Error taxonomy
"""
