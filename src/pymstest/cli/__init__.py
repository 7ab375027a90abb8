"""
Command line interface for pymstest.
"""
