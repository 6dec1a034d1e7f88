"""
soundcraft - Voice DSP core.

Structure:
- core/      - Application core (config, errors, decode/encode adapters)
- common/    - Shared utilities (types, primitives, logging)
- modules/   - Business modules (analysis, effects, session)
"""

__version__ = "1.0.0"
