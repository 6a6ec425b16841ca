"""
Utility modules for the manipulator command line.
"""
