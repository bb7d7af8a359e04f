"""Test that collaborator implementations conform to their protocols."""

from classpulse.domain.interfaces import AuthProvider, Datastore, Notifier
from classpulse.infrastructure.dynamodb_datastore import DynamoDBDatastore
from classpulse.infrastructure.jwt_auth_provider import JwtAuthProvider
from classpulse.infrastructure.smtp_notifier import SmtpNotifier


def test_jwt_provider_implements_protocol():
    provider = JwtAuthProvider(secret="s")

    assert isinstance(provider, AuthProvider)
    assert callable(getattr(provider, "issue_token"))
    assert callable(getattr(provider, "verify"))


def test_smtp_notifier_implements_protocol():
    notifier = SmtpNotifier(host=None, user=None, password=None)

    assert isinstance(notifier, Notifier)
    assert not notifier.configured


def test_dynamodb_datastore_implements_protocol():
    datastore = DynamoDBDatastore("sessions", "snapshots")

    assert isinstance(datastore, Datastore)
    assert hasattr(datastore, "save_session")
    assert hasattr(datastore, "append_snapshot")
