"""
Shared utilities for the HR Records Gateway.
"""
