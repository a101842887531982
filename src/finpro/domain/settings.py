"""User preferences service."""

from dataclasses import fields, replace
from typing import Any

import structlog

from finpro.domain.entities import AppSettings
from finpro.domain.errors import ValidationError
from finpro.domain.state import FinanceState

logger = structlog.get_logger(__name__)

SETTING_NAMES = tuple(f.name for f in fields(AppSettings))


class SettingsService:
    """Read and change the per-user settings record."""

    def __init__(self, state: FinanceState):
        self.state = state

    def get_settings(self) -> AppSettings:
        return self.state.snapshot.settings

    def update_settings(self, **changes: Any) -> AppSettings:
        """Replace the given settings fields and persist the whole record.

        Raises:
            ValidationError: If a field name is unknown
        """
        unknown = sorted(set(changes) - set(SETTING_NAMES))
        if unknown:
            raise ValidationError(
                f"Unknown setting(s): {', '.join(unknown)}. Valid settings: {', '.join(SETTING_NAMES)}"
            )

        snapshot = self.state.snapshot
        updated = replace(snapshot.settings, **changes)

        def write(db) -> None:
            db.upsert_settings(updated)

        self.state.commit(replace(snapshot, settings=updated), [write])
        # never log the api key value
        logger.info("settings.updated", fields=sorted(changes))
        return updated
