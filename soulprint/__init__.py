"""
Soulprint - conversational personality profiling and compatibility scoring

This package infers a personality profile from free-form conversational text,
compresses it into a fixed 256-slot vector and a compact "#HHMMSS" code, and
scores pairs of users for compatibility and relationship success.

Key Design Decisions:
- Extraction is lexical and shallow: keyword hits, structural cues, latency
- Profiles accumulate by exponential smoothing with slowly growing confidence
- Four independent scoring methods are blended into one compatibility score
- Missing data degrades to neutral, low-confidence results instead of errors
"""

__version__ = "1.0.0"
