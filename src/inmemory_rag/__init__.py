"""Retrieval-augmented question answering over an in-memory vector index."""
