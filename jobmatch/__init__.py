"""Candidate/job compatibility scoring with AI-assisted escalation."""

__version__ = "0.3.0"
