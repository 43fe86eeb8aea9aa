"""
Symbol catalog synchronization from FinMind into the symbols table.
"""
