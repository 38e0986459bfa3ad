"""
mux-storage - a write-only media storage adapter backed by Mux Video.

This package contains the complete adapter and its HTTP service:
- core: Framework-agnostic upload pipeline and reference mapping
- infrastructure: Mux API client and streamed upload transfer
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
