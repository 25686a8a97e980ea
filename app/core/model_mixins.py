"""
Model mixins providing reusable functionality for Django models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
    FieldTrackerMixin: Remember the values loaded from the database so
        save() hooks and signals can tell what changed

Usage:
    from core.models import BaseModel
    from core.model_mixins import FieldTrackerMixin, UUIDPrimaryKeyMixin

    class Document(UUIDPrimaryKeyMixin, FieldTrackerMixin, BaseModel):
        tracked_fields = ("title",)
        title = models.CharField(max_length=100)

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.db import models

if TYPE_CHECKING:
    from typing import Any


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Non-guessable ids that do not reveal record count or order in URLs.

    Fields:
        id: UUIDField as primary key (auto-generated)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class FieldTrackerMixin(models.Model):
    """
    Snapshot selected field values as they were last persisted.

    The snapshot is taken when an instance is loaded from the database and
    refreshed after every successful save(). Code running before the write
    (save overrides, pre_save signals) can compare the in-memory values
    against it.

    Attributes:
        tracked_fields: Attribute names to snapshot. Use the attname for
            foreign keys (e.g. "owner_id").

    Usage:
        channel = Channel.objects.get(pk=pk)
        channel.name = "general"
        channel.changed_fields()   # {"name"}
        channel.loaded_value("name")  # previous name
    """

    tracked_fields: tuple[str, ...] = ()

    class Meta:
        abstract = True

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance.reset_tracking()
        return instance

    def _tracked_snapshot(self) -> dict[str, Any]:
        # Deferred fields are left out so tracking never triggers a query
        deferred = self.get_deferred_fields()
        return {
            name: getattr(self, name)
            for name in self.tracked_fields
            if name not in deferred
        }

    def reset_tracking(self) -> None:
        """Take a new snapshot of the tracked fields."""
        self._loaded_values = self._tracked_snapshot()

    def loaded_value(self, name: str, default: Any = None) -> Any:
        """Return the value ``name`` had when last loaded or saved."""
        return getattr(self, "_loaded_values", {}).get(name, default)

    def changed_fields(self) -> set[str]:
        """Return names of tracked fields that differ from the snapshot."""
        loaded = getattr(self, "_loaded_values", None)
        if loaded is None:
            return set(self._tracked_snapshot())
        return {
            name
            for name, value in self._tracked_snapshot().items()
            if name in loaded and loaded[name] != value
        }

    def has_changed(self, name: str | None = None) -> bool:
        """Whether ``name`` (or any tracked field) changed since the snapshot."""
        changed = self.changed_fields()
        return name in changed if name else bool(changed)

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        self.reset_tracking()
