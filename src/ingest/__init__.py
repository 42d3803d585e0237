"""Bulk import input and orchestration.

This package reads JSON-lines input, cuts it into shards and drives
each shard through parse, key derivation, packing and emission.
"""
