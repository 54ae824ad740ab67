"""Model-call providers.

This module contains:
- The provider-neutral completion interface and tool-calling types
- Ollama, OpenAI and Anthropic implementations
- Provider selection from '<provider>:<model>' configuration strings
"""
