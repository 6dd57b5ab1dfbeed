"""Remote table reads.

It is internal to pystreetlight and may change at any time.
"""
