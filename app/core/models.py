"""
Abstract base model.

Mixins for UUID keys and change tracking are in core.model_mixins and
go before BaseModel in the bases:

    class Channel(UUIDPrimaryKeyMixin, FieldTrackerMixin, BaseModel):
        ...
"""

from __future__ import annotations

from django.db import models


class BaseModel(models.Model):
    """Adds created_at/updated_at and newest-first default ordering."""

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this record was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when this record was last modified",
    )

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self.pk})"
