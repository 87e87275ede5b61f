"""Kernel – framework-free building blocks: errors, events, time, result types."""
