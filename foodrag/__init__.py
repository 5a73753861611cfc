"""
Food RAG: retrieval-augmented question answering over a small food collection.
"""
