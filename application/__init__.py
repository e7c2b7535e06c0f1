"""Workflow orchestration for tillroll."""
