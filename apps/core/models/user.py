# PATH: apps/core/models/user.py
from django.db import models
from django.contrib.auth.models import AbstractUser, Group, Permission


# --------------------------------------------------
# Custom User (AUTH_USER_MODEL)
# --------------------------------------------------

class User(AbstractUser):
    """
    Viewer / teacher / admin identity.

    - AUTH_USER_MODEL = core.User
    - role drives the capability set used by the access grant checker
    - superusers are always treated as ADMIN
    """

    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Admin"
        TEACHER = "TEACHER", "Teacher"
        LEARNER = "LEARNER", "Learner"

    name = models.CharField(max_length=50, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)

    role = models.CharField(
        max_length=16,
        choices=Role.choices,
        default=Role.LEARNER,
        db_index=True,
    )

    # reverse accessors must not clash with auth.User
    groups = models.ManyToManyField(
        Group,
        related_name="core_users",
        blank=True,
    )
    user_permissions = models.ManyToManyField(
        Permission,
        related_name="core_users",
        blank=True,
    )

    class Meta:
        app_label = "core"
        db_table = "accounts_user"
        ordering = ["-id"]

    def __str__(self):
        return self.username

    @property
    def effective_role(self) -> str:
        if self.is_superuser:
            return self.Role.ADMIN
        return self.role

    @property
    def is_teacher(self) -> bool:
        return self.effective_role == self.Role.TEACHER

    @property
    def is_learner(self) -> bool:
        return self.effective_role == self.Role.LEARNER
