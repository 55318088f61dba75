"""Configuration dictionaries for Sky Fighter"""
