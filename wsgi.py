"""
Production WSGI entry point for Gunicorn.

Usage:
    gunicorn -w 1 -b 0.0.0.0:$PORT wsgi:app

Use a single worker with STORAGE_BACKEND=file: workers share the JSON file
without coordinating read-modify-write, so concurrent edits can be lost.
"""

from zplus import create_app

# Gunicorn looks for a top-level 'app' variable here.
app = create_app()
