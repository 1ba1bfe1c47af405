"""Outbound messages handed to the task queue. Transport lives elsewhere."""
