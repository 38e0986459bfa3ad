"""
Core upload logic.

This module is framework-agnostic - it doesn't import FastAPI, httpx,
or any infrastructure concerns. The Mux client and the byte transfer
arrive through the protocols in pipeline.py.
"""
