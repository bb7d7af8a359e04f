"""Infrastructure layer components."""

from .dynamodb_datastore import DynamoDBDatastore
from .jwt_auth_provider import DevUser, JwtAuthProvider
from .smtp_notifier import SmtpNotifier

__all__ = [
    "DevUser",
    "DynamoDBDatastore",
    "JwtAuthProvider",
    "SmtpNotifier",
]
