"""
codemap: static analysis of JavaScript/TypeScript/JSX projects.
"""

__version__ = "0.1.0"
