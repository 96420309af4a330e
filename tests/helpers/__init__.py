"""
Test doubles for Accueil collaborators.
"""

from tests.helpers.fake_identity_provider import FakeIdentityProvider
from tests.helpers.in_memory_record_store import InMemoryRecordStore

__all__ = ["FakeIdentityProvider", "InMemoryRecordStore"]
