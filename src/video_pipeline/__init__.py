"""YouTube video chatbot pipeline.

This package fetches YouTube transcripts, splits them into overlapping chunks,
stores their embeddings in a per-video Pinecone namespace, and answers
questions about a video from the retrieved chunks.
"""
