"""Collaborative film pre-production planner."""
