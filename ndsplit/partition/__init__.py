# ndsplit/partition/__init__.py
"""
Streaming partition pipeline: decoder -> extractor -> sink pool, driven by
the engine. Import submodules directly, e.g.:
  from ndsplit.partition.engine import PartitionEngine
"""

__all__ = []  # keep empty; no side-effect imports
