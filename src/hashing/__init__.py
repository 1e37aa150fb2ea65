"""Content hashing for tables.

This package computes the digests stored with every snapshot.
They are recomputed at verification time to detect tampering.
"""
