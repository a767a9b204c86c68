"""Data models: tasks and podcast scripts."""
