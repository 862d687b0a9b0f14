"""
Utility helpers for mediagate.
"""
