"""
Web dashboard.
"""
