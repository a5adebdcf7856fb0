# apps/core/views.py

from drf_yasg.utils import swagger_auto_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsAdminOrStaff
from apps.core.serializers import LoginThrottleResetSerializer, UserSerializer
from apps.core.services.login_throttle import get_login_rate_limiter
from libs.ratelimit import normalize_key


# --------------------------------------------------
# Me
# --------------------------------------------------

class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = UserSerializer(request.user)
        return Response(serializer.data)


# --------------------------------------------------
# Login throttle (staff)
# --------------------------------------------------

class LoginThrottleResetView(APIView):
    """
    POST /core/login-throttle/reset/ {"identifier": "..."}

    Clears failures and lockout for one login identifier.
    """

    permission_classes = [IsAuthenticated, IsAdminOrStaff]

    @swagger_auto_schema(request_body=LoginThrottleResetSerializer)
    def post(self, request):
        serializer = LoginThrottleResetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        key = normalize_key(serializer.validated_data["identifier"])
        limiter = get_login_rate_limiter()
        limiter.reset(key)
        return Response({"success": True, "identifier": key})

    @swagger_auto_schema(auto_schema=None)
    def get(self, request):
        """GET ?identifier=... : remaining attempts / wait for one identifier."""
        key = normalize_key(request.query_params.get("identifier"))
        limiter = get_login_rate_limiter()
        return Response({
            "identifier": key,
            "remainingAttempts": limiter.get_remaining_attempts(key),
            "waitSeconds": limiter.get_remaining_wait(key),
        })
