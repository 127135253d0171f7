"""
Feed endpoints: paginated listings and internal ingestion.
"""
