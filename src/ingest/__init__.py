"""Source ingestion.

This module reads tracked CSV files into the table model.
It prepares tables for snapshotting and live status diffs.
"""
