"""
Core module - Configuration, service context and server orchestration
"""
