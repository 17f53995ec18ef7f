"""
Services shared by the snapshot engine: hashing, file I/O, settings
and notifications.
"""
