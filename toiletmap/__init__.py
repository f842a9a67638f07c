"""
Backend package for the Toilet Map API.

This package provides a FastAPI application for a crowdsourced public
restroom directory, with an in-memory store for local runs and tests and a
SQLAlchemy-backed store for deployments.
"""
