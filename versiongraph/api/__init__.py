"""
HTTP boundary for the version graph engine.
"""
