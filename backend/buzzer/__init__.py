"""
抢答器后端包
"""

__version__ = "1.0.0"
