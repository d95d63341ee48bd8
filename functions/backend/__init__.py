"""
Backend package for the Fitness Chronicle API.

This package provides a FastAPI application over a per-user document store
(Firestore in production, an in-memory store for local runs and tests), plus
the label, day-assignment and exercise-log services it exposes.
"""
