"""
Scheduled subscriber notifications delivered through Telegram and LINE.
"""
