"""HTTP layer of the compliance API.

Only versioned routes live here (``v1/``, mounted under /api/v1 by main.py);
``/health`` is registered directly on the app.
"""
