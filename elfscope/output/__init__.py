"""
ELFScope Output
================

Output rendering modules for decoded images.

- ``console`` -- Rich-based terminal summary
- ``report``  -- JSON report generation
"""
