"""Conversation content model and normalization.

This module handles:
- Conversation turns and request attachments
- Provider-neutral message content (text, images, documents)
- Normalization of attachments and history into model messages
"""
