"""
Image Relay Domain

Watches a source directory for new images:
- Uploads each file to the background-removal API
- Stores the API result in the processed directory
- Archives the original in the destination directory
"""

__all__ = ["relocator", "uploader", "watcher"]
