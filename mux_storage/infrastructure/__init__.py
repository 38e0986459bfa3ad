"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- mux: Mux Video API client
- transfer: Streamed PUT of local files to upload URLs
"""
