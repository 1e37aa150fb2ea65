"""Repository workspace plumbing.

This module bootstraps the repository layout and drives git.
"""
