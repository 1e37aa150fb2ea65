"""Storage and versioning layer.

This module persists immutable table snapshots and saved diffs.
It powers snapshot loading, listing, and the client SDK.
"""
