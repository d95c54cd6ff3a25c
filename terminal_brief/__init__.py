"""
terminal-brief - a personalized terminal startup dashboard.

Aggregates system stats, a greeting, the weather, GitHub pull requests and
stalled Linear issues into a single block of text printed when a shell starts.
"""

__version__ = "1.0.0"
