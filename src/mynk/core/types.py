"""Shared types for mynk.

This module defines the action enum and the base exception used by every
component of the client.
"""

from __future__ import annotations

from enum import Enum


class Action(str, Enum):
    """Classification of a tracked file for the current reconciliation pass.

    Persisted in the baseline and sent on the wire by value.
    """

    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    PASS = "pass"  # Settled, nothing to send


class MynkError(Exception):
    """Base exception for all mynk errors."""
