"""Exceptions raised while turning webhook calls into chat lines."""

from __future__ import annotations


class NotifierError(Exception):
    """Base class for every error this package raises on purpose."""


class MalformedPayload(NotifierError, ValueError):
    """The request body is not JSON, or does not match the event's schema."""

    def __init__(self, event: str, reason: str):
        self.event = event
        self.reason = reason
        super().__init__(f"malformed {event} payload: {reason}")


class UnrecognizedEventType(NotifierError):
    """The event-type header is missing or names an event we do not handle."""

    def __init__(self, label: str | None):
        self.label = label
        super().__init__(f"unrecognized event type: {label!r}")


class RenderFailure(NotifierError):
    """A message template could not be rendered."""


class RoutingConfigError(NotifierError, ValueError):
    """The channel mapping file is unreadable or violates its invariants."""


class DeliveryError(NotifierError):
    """A chat line could not be handed to the chat network."""
