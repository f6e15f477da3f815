"""
Shared Infrastructure
=====================

Low-level technical concerns:
- Structured JSON logging with correlation ids
- Latency logging for report computations
"""
