"""
connect4_engine.interfaces - User interfaces for the Connect Four engine

This package contains front ends that drive a GameSession, currently the
terminal CLI.
"""

# Don't import anything here to avoid circular imports
__all__ = []
