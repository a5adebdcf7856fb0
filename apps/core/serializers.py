# apps/core/serializers.py

from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()


# ------------------------------------
# User Base
# ------------------------------------

class UserSerializer(serializers.ModelSerializer):
    role = serializers.CharField(source="effective_role", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "phone",
            "role",
            "is_staff",
            "is_superuser",
        ]


# ------------------------------------
# Login throttle (admin override)
# ------------------------------------

class LoginThrottleResetSerializer(serializers.Serializer):
    identifier = serializers.CharField(allow_blank=True, trim_whitespace=True)
