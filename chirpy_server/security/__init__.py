"""
Security module - Authentication and session tokens
"""
