"""
Configuration module: settings (.env + API key rotation) and constants.
"""
