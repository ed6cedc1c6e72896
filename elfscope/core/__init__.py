"""
ELFScope Core Module
=====================

Contains the data models, the error hierarchy and the file-level engine.
"""
