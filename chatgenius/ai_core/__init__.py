# AI Core module

"""
AI Core Module - embeddings and text generation for chat search.

Key responsibilities:
- Message and query embeddings (gen_ai_hub proxy)
- Answering questions with retrieved message context
- AI persona replies in the style of a user
"""
