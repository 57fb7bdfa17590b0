"""Local store - persisted cache of promoters, activities, notifications, and session."""

import copy
from typing import Any, Callable, Optional

from pydantic import TypeAdapter, ValidationError

from promoterflow.models.activity import Activity
from promoterflow.models.notification import Notification
from promoterflow.models.promoter import Promoter
from promoterflow.models.session import SessionState
from promoterflow.services.change_channel import ChangeChannel, ChangeMessage
from promoterflow.services.storage import JsonFileStorage, StorageBackend
from promoterflow.utils.config import AppConfig
from promoterflow.utils.ids import generate_id
from promoterflow.utils.logging import get_structured_logger
from promoterflow.utils.seed_data import default_activities, default_promoters

logger = get_structured_logger(__name__)

PROMOTERS = "promoters"
ACTIVITIES = "activities"
NOTIFICATIONS = "notifications"
SESSION = "session"

COLLECTION_KEYS = {
    PROMOTERS: "pf_promoters",
    ACTIVITIES: "pf_activities",
    NOTIFICATIONS: "pf_notifications",
    SESSION: "pf_session",
}
_COLLECTION_BY_KEY = {key: name for name, key in COLLECTION_KEYS.items()}

_ADAPTERS: dict[str, TypeAdapter] = {
    PROMOTERS: TypeAdapter(list[Promoter]),
    ACTIVITIES: TypeAdapter(list[Activity]),
    NOTIFICATIONS: TypeAdapter(list[Notification]),
    SESSION: TypeAdapter(Optional[SessionState]),
}

_EMPTY_DEFAULTS: dict[str, Any] = {
    PROMOTERS: [],
    ACTIVITIES: [],
    NOTIFICATIONS: [],
    SESSION: None,
}

Listener = Callable[[str], None]


class LocalStore:
    """Write-through cache over a storage backend.

    Construct once at process start and pass it to every consumer. Each
    mutation is persisted before ``set`` returns, then published on the change
    channel so other stores sharing the channel converge (last writer wins).
    """

    def __init__(
        self,
        storage: StorageBackend,
        channel: Optional[ChangeChannel] = None,
        defaults: Optional[dict[str, Any]] = None,
        store_id: Optional[str] = None,
    ):
        self.storage = storage
        self.channel = channel
        self.store_id = store_id or generate_id("store-")
        self._defaults = {**_EMPTY_DEFAULTS, **(defaults or {})}
        self._listeners: list[Listener] = []
        self._unsubscribers: list[Callable[[], None]] = []
        self._closed = False

        self._state: dict[str, Any] = {
            collection: self._load(collection) for collection in COLLECTION_KEYS
        }

        if channel is not None:
            for key in COLLECTION_KEYS.values():
                self._unsubscribers.append(channel.subscribe(key, self._on_change))

        logger.info(
            "LocalStore initialized",
            store_id=self.store_id,
            promoters=len(self._state[PROMOTERS]),
            activities=len(self._state[ACTIVITIES]),
            notifications=len(self._state[NOTIFICATIONS]),
            has_session=self._state[SESSION] is not None
        )

    def _default(self, collection: str) -> Any:
        return _ADAPTERS[collection].validate_python(copy.deepcopy(self._defaults[collection]))

    def _load(self, collection: str) -> Any:
        key = COLLECTION_KEYS[collection]
        raw = self.storage.read(key)
        if raw is None:
            return self._default(collection)

        try:
            return _ADAPTERS[collection].validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Persisted collection is corrupt, using defaults",
                collection=collection,
                key=key,
                error_count=e.error_count()
            )
            return self._default(collection)

    def _check_collection(self, collection: str) -> None:
        if collection not in COLLECTION_KEYS:
            raise KeyError(f"Unknown collection: {collection}")

    def get(self, collection: str) -> Any:
        """Return a copy of the collection."""
        self._check_collection(collection)
        return copy.deepcopy(self._state[collection])

    def set(self, collection: str, updater: Callable[[Any], Any]) -> Any:
        """Replace a collection with ``updater(current)`` and persist it."""
        self._check_collection(collection)
        adapter = _ADAPTERS[collection]
        value = adapter.validate_python(updater(self.get(collection)))
        serialized = adapter.dump_json(value).decode("utf-8")

        key = COLLECTION_KEYS[collection]
        self.storage.write(key, serialized)
        self._state[collection] = value

        if self.channel is not None:
            self.channel.publish(key, serialized, self.store_id)
        self._notify(collection)
        return copy.deepcopy(value)

    def clear(self, collection: str) -> None:
        """Remove the persisted entry and reset the collection to its empty value."""
        self._check_collection(collection)
        key = COLLECTION_KEYS[collection]
        self.storage.delete(key)
        self._state[collection] = _ADAPTERS[collection].validate_python(
            copy.deepcopy(_EMPTY_DEFAULTS[collection])
        )

        if self.channel is not None:
            self.channel.publish(key, None, self.store_id)
        self._notify(collection)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state-change listener; it receives the collection name."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, collection: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(collection)
            except Exception as e:
                logger.error(
                    "State listener failed",
                    collection=collection,
                    error=str(e),
                    exc_info=True
                )

    def _on_change(self, message: ChangeMessage) -> None:
        if message.origin == self.store_id:
            return

        collection = _COLLECTION_BY_KEY[message.key]
        adapter = _ADAPTERS[collection]
        if message.value is None:
            value = adapter.validate_python(copy.deepcopy(_EMPTY_DEFAULTS[collection]))
        else:
            try:
                value = adapter.validate_json(message.value)
            except ValidationError as e:
                logger.warning(
                    "Ignoring undecodable change message",
                    collection=collection,
                    origin=message.origin,
                    error_count=e.error_count()
                )
                return

        self._state[collection] = value
        logger.debug(
            "Collection replaced from change channel",
            store_id=self.store_id,
            collection=collection,
            origin=message.origin
        )
        self._notify(collection)

    def close(self) -> None:
        """Flush every collection to storage and detach from the change channel."""
        if self._closed:
            return

        for collection, key in COLLECTION_KEYS.items():
            value = self._state[collection]
            if collection == SESSION and value is None:
                continue
            self.storage.write(key, _ADAPTERS[collection].dump_json(value).decode("utf-8"))

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._closed = True
        logger.info("LocalStore closed", store_id=self.store_id)

    def __enter__(self) -> "LocalStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def open_local_store(
    directory: Optional[str] = None,
    channel: Optional[ChangeChannel] = None,
) -> LocalStore:
    """Open the file-backed store, seeding promoters and activities when storage is empty."""
    return LocalStore(
        JsonFileStorage(directory or AppConfig.STORAGE_DIR),
        channel=channel,
        defaults={
            PROMOTERS: [p.model_dump() for p in default_promoters()],
            ACTIVITIES: [a.model_dump() for a in default_activities()],
        },
    )
