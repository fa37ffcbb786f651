"""Snapgram - a photo-sharing social media backend.

This package provides:
- JWT session authentication with access and refresh tokens
- Users with follow relationships
- Image posts with likes and comments
- Image uploads stored per user
"""

__version__ = "1.0.0"
