"""
AdGen AI backend.

Turns an uploaded product photo into AI-generated marketing assets:
image style variations, marketing copy and short promotional videos.
"""

__version__ = "0.1.0"
