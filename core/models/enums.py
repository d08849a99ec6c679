"""
Pure Enumeration Types for Core Framework.

No business logic - pure type definitions only.

Exports:
    WorkflowOutcome: Terminal state of one processed envelope
"""

from enum import Enum


class WorkflowOutcome(Enum):
    """
    Terminal state of one inbound envelope (one pass, no transitions back).

    State transitions:
    - RECEIVED -> DECODE_FAILED (body unreadable, no publish)
    - RECEIVED -> FILTERED_OUT (upstream already failed, no publish)
    - RECEIVED -> UNAUTHORIZED | INVALID | ACCEPTED | FAILED (one publish)
    """

    DECODE_FAILED = "decode_failed"
    FILTERED_OUT = "filtered_out"
    UNAUTHORIZED = "unauthorized"
    INVALID = "invalid"
    ACCEPTED = "accepted"
    FAILED = "failed"

    @property
    def publishes(self) -> bool:
        """True for outcomes that emit exactly one outbound message."""
        return self not in (WorkflowOutcome.DECODE_FAILED, WorkflowOutcome.FILTERED_OUT)
