"""CLI module for histcompact."""
