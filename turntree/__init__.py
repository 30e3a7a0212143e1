"""
Turntree - Turn-Based Game Engine

A generic engine for turn-based, discrete-state games. Game logic is
written as a set of states; the engine provides:
- A history tree with scoped, copy-on-write data
- Automatic transitions through states that need no input
- Undo back to the last real choice
- Monte Carlo estimates of who wins and which move helps
"""

__version__ = "0.1.0"
