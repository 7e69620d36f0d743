"""
ProjectFlow API - AI-assisted project planning with a collaborative task board
"""
__version__ = "1.0.0"
