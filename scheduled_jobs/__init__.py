"""
Scheduled jobs: symbol catalog synchronization and subscriber notifications.
"""
