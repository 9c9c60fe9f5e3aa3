"""
Shared helpers: prompt text and the document workspace tools.
"""
