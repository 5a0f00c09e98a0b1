"""
Console formatting helpers.
"""
