#!/usr/bin/env python3
"""
run.py - Main entry point for the Connect Four engine

Examples:
    python run.py play --mode hvo --seed 7
    python run.py --debug play --mode hvh
    python run.py position --position 0,0,0,...
    python run.py benchmark --iterations 500
"""

import sys

from connect4_engine.interfaces.cli import main

if __name__ == "__main__":
    sys.exit(main())
