"""Table diffing.

This package compares two tables column by column and row by row.
It produces ordered change records and their JSON artifact form.
"""
