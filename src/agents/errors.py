"""Exceptions raised inside agents and tools."""


class AgentError(Exception):
    """Raised when an agent loop cannot produce a final answer."""
    pass


class ToolArgumentError(Exception):
    """Raised when tool arguments do not match the tool's schema."""
    pass


class DomainToolError(Exception):
    """Raised when a domain tool's backing lookup fails."""
    pass
