"""Chunking, batching, and sequential model invocation."""
