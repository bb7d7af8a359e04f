"""Collaborator protocols for the classroom attention tracker."""

from .auth_provider import AuthProvider
from .datastore import Datastore
from .notifier import DeliveryStatus, Notifier

__all__ = ["AuthProvider", "Datastore", "DeliveryStatus", "Notifier"]
