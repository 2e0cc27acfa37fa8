"""Repositories: async persistence facade and storage adapters."""

from domainkit.repositories.base import Repository, RepositoryAdapter, repository
from domainkit.repositories.memory import InMemoryAdapter

__all__ = [
    "InMemoryAdapter",
    "Repository",
    "RepositoryAdapter",
    "repository",
]
