# PATH: apps/core/models/base.py
"""
Shared abstract models.

Every domain app (courses, video) inherits timestamps from here so that
rows carry created/updated times without repeating the fields.
"""
from django.db import models


class TimestampModel(models.Model):
    """created_at / updated_at maintained by the ORM."""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
