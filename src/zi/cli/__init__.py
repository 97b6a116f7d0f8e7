"""
Command line interface for zi.
"""
