"""
Services shared by the engines and the command line:
hashing, runtime context and persistent settings.
"""
