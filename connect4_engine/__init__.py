"""
connect4_engine - Connect Four game engine

This package provides the Connect Four board and rules, a one-ply heuristic
opponent, a session object that orchestrates human and automated turns for a
presentation layer, a terminal interface and a Gymnasium environment.
"""

# Version number
__version__ = '0.1.0'
