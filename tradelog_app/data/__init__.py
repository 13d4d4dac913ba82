"""
Execution data ingestion module.

Handles decoding and parsing of broker execution exports into canonical
execution records, plus the shared trade and price bar data models.
"""
