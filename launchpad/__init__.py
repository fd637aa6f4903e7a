"""
Launchpad - chat-driven ERC20 token launcher for Base
"""

__version__ = '1.0.0'
