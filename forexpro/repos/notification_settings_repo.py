"""Notification settings repository — JSON document in the key-value store."""

import json
import logging

from forexpro.notifications import NotificationSettings
from forexpro.repos.storage import KeyValueStore

logger = logging.getLogger("forexpro")

NOTIFICATION_SETTINGS_KEY = "forexpro_notification_settings"


class NotificationSettingsRepo:
    """Loads and saves ``NotificationSettings``.

    Missing or unreadable values yield the default settings.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load(self) -> NotificationSettings:
        raw = self._store.get(NOTIFICATION_SETTINGS_KEY)
        if not raw:
            return NotificationSettings()
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("settings document is not an object")
            return NotificationSettings.from_dict(data)
        except (ValueError, TypeError) as exc:
            logger.warning("Using default notification settings (%s).", exc)
            return NotificationSettings()

    def save(self, settings: NotificationSettings) -> None:
        self._store.set(NOTIFICATION_SETTINGS_KEY, json.dumps(settings.to_dict()))
