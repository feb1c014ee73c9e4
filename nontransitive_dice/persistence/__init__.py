"""
Round transcripts: events, in-memory recording, JSON and CSV storage.
"""
