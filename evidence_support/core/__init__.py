"""
Core snapshot engine and monitoring session.
"""
