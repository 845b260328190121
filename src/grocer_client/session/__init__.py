"""Session renewal: pending queue, renewal state and the coordinator."""

from grocer_client.session.navigation import LoggingNavigator, Navigator
from grocer_client.session.queue import PendingEntry, PendingQueue
from grocer_client.session.renewal import RenewalCoordinator
from grocer_client.session.state import RenewalState

__all__ = [
    "LoggingNavigator",
    "Navigator",
    "PendingEntry",
    "PendingQueue",
    "RenewalCoordinator",
    "RenewalState",
]
