"""
lift-readiness: per-muscle fatigue, readiness and progression advice
for strength training logs.
"""

__version__ = "0.1.0"
