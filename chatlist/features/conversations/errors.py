from __future__ import annotations


class ConversationsDomainError(Exception):
    """Base exception for conversation list operations."""


class UnauthorizedError(ConversationsDomainError):
    pass


class UnavailableError(ConversationsDomainError):
    pass


class MalformedResponseError(ConversationsDomainError):
    pass
