"""Application ports."""
from stocksim.app.application.ports.subscriber_channel import ISubscriberChannel

__all__ = ["ISubscriberChannel"]
