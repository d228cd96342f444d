"""Shared utilities and schemas used across LearnHub modules."""
