"""
Analysis - voice feature extraction.

- config.py    - Tunable constants and presets
- tasks/       - One feature per task over a shared AudioContext
- pipelines/   - VoiceAnalysisPipeline producing a FeatureReport
"""
