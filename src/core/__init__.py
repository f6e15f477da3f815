"""
Core Module
============

Framework-agnostic pieces every module depends on: the exception taxonomy.
"""

from src.core.exceptions import (
    ApplicationException,
    ConfigUnavailableException,
    DomainException,
    InvalidTransitionException,
    MalformedFilterException,
    RepositoryException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    "ApplicationException",
    "ConfigUnavailableException",
    "DomainException",
    "InvalidTransitionException",
    "MalformedFilterException",
    "RepositoryException",
    "ResourceNotFoundException",
    "ValidationException",
]
