"""
histcompact - Chat history compaction engine
"""

__version__ = "0.1.0"
__logo__ = "🗜️"
