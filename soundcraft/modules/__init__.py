"""Business modules: analysis, effects, session."""
