"""
OmniForge - single-prompt multi-modal content production.
"""
__version__ = "1.0.0"
