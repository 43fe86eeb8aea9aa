"""
Constants for symbols table synchronization.
"""

# Number of symbols written per upsert call; each batch runs in its own transaction
BATCH_SIZE = 100

# Upper bound on concurrent upsert workers; keep below DB_MAX_CONNECTIONS
MAX_WORKERS = 5
