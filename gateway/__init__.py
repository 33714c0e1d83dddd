"""
HTTP service exposing the consistent hashing ring
"""
