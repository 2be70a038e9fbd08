"""
ndsplit: split a newline-delimited JSON file into one file per routing key.

Entry point:
  python -m ndsplit.partition.run [options] <file.ndjson> [path identifiers...]
"""

__version__ = "0.1.0"
