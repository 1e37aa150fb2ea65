"""Snapshot integrity verification.

This package recomputes stored hashes and reports which ones drifted.
"""
