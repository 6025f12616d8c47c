"""Data clients handed to business logic.

``ScopedClient`` is what user-facing code gets: both stores are bound
to the caller and refuse anything else. ``ServiceClient`` reaches every
object in the bucket and exists only for maintenance jobs. The two are
unrelated types, so one cannot be passed where the other is expected.
"""

from typing import TYPE_CHECKING, final

from server.apps.files.infrastructure.records import MetadataStore
from server.apps.files.infrastructure.storage import (
    FileStorage,
    ObjectStore,
    get_file_storage,
)

if TYPE_CHECKING:
    from server.apps.accounts.logic.identity import Identity


@final
class ScopedClient:
    """Data access restricted to one authenticated user."""

    def __init__(
        self,
        identity: 'Identity',
        records: MetadataStore,
        storage: ObjectStore,
    ) -> None:
        """Assemble the client; use scope_client() instead.

        Args:
            identity: Verified caller.
            records: Metadata store bound to the caller.
            storage: Object store bound to the caller's prefix.
        """
        self.identity = identity
        self.records = records
        self.storage = storage

    @property
    def user_id(self) -> int:
        """Id of the user this client acts for."""
        return self.identity.user_id


def scope_client(identity: 'Identity') -> ScopedClient:
    """Build the data client for a verified caller.

    Args:
        identity: Result of verify_token.

    Returns:
        ScopedClient whose stores only see the caller's data.
    """
    return ScopedClient(
        identity=identity,
        records=MetadataStore(identity.user_id),
        storage=ObjectStore(identity.user_id),
    )


@final
class ServiceClient:
    """Privileged access to the whole bucket for maintenance jobs."""

    def __init__(self, storage: FileStorage) -> None:
        """Assemble the client; use service_client() instead.

        Args:
            storage: Unrestricted storage backend.
        """
        self.storage = storage

    def remove_object(self, key: str) -> None:
        """Remove any object in the bucket.

        Args:
            key: Object key.

        Raises:
            Exception: If the backend rejects the removal.
        """
        self.storage.delete(key)

    def object_exists(self, key: str) -> bool:
        """Check whether any object exists under the key."""
        return self.storage.exists(key)


def service_client() -> ServiceClient:
    """Build the privileged client for management commands.

    Returns:
        ServiceClient over the default storage.
    """
    return ServiceClient(get_file_storage())
