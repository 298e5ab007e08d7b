"""
Coffre - wallet sessions and ether transfer simulation.
"""

__version__ = "0.1.0"
