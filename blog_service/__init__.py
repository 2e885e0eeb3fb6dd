"""
Blog Service - posts, threaded comments and profiles over a JSON file store
"""
__version__ = "1.0.0"
