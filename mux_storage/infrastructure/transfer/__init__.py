"""
Streamed upload transfer.

Reads local files chunk by chunk and sends them as a single PUT body,
so memory use is bounded by the chunk size rather than the file size.
"""

from .stream import HttpxStreamTransfer, LocalFileStream, open_local_stream

__all__ = ["HttpxStreamTransfer", "LocalFileStream", "open_local_stream"]
