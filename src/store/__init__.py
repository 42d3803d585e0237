"""Bulk-load output layer.

This package buffers and sorts cells per shard, writes immutable
bulk-load files, and records the job manifest.
"""
