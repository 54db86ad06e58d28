"""feednotes: a tiny terminal feed of personal notes.

Notes live in a single JSON file, are browsed as a scrollable feed and are
written in a small composer with vim-like Normal/Insert modes.
"""

__version__ = "0.1.0"
