"""
connect4_engine/ai/__init__.py - Automated opponent for Connect Four

This package provides the one-ply heuristic opponent used in
human-versus-opponent games.
"""

from connect4_engine.ai.opponent import OpponentPolicy, find_winning_column, weighted_pool

__all__ = ['OpponentPolicy', 'find_winning_column', 'weighted_pool']
