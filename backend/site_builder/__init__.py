"""
AI Site Builder backend: provider gateway, code assistant and project
generation services behind a FastAPI app.
"""

__version__ = "0.1.0"
