"""
Core synchronization logic.

UI-agnostic models, errors, exclusion patterns and the folder engines.
"""
