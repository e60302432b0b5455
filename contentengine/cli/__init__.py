"""
Command-line interface for the content engine
"""
