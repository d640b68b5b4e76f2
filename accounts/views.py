import logging

from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from .models import UserProfile
from .permissions import IsAdmin, IsAdminOrManager
from .serializers import (
    LoginSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    UserCreateSerializer,
    UserSerializer,
    UserUpdateSerializer,
)

logger = logging.getLogger(__name__)


# ----- Authentication -----
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def login_view(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    username = serializer.validated_data["username"]
    password = serializer.validated_data["password"]

    # Django's ModelBackend refuses inactive users, so check them first to
    # give suspended operators a clear answer.
    existing = User.objects.filter(username=username).first()
    if existing and not existing.is_active and existing.check_password(password):
        return Response({"error": "Account is suspended"}, status=status.HTTP_403_FORBIDDEN)

    user = authenticate(request, username=username, password=password)
    if user is None:
        return Response({"error": "Invalid credentials"}, status=status.HTTP_400_BAD_REQUEST)
    login(request, user)
    return Response(UserSerializer(user).data)


@api_view(["POST"])
def logout_view(request):
    logout(request)
    return Response({"message": "Logged out"})


@api_view(["GET"])
def me(request):
    return Response(UserSerializer(request.user).data)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def register(request):
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if User.objects.filter(username__iexact=data["username"]).exists():
        return Response({"error": "Username already exists"}, status=status.HTTP_409_CONFLICT)
    if data.get("email") and User.objects.filter(email__iexact=data["email"]).exists():
        return Response({"error": "Email already exists"}, status=status.HTTP_409_CONFLICT)

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=data["username"],
                email=data.get("email", ""),
                password=data["password"],
            )
            profile = user.profile
            profile.name = data["name"]
            profile.role = UserProfile.USER
            profile.save(update_fields=["name", "role"])
    except IntegrityError:
        return Response({"error": "Username already exists"}, status=status.HTTP_409_CONFLICT)

    logger.info("Registered user %s", user.username)
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


# ----- User management -----
class UserViewSet(viewsets.ModelViewSet):
    queryset = User.objects.select_related("profile").order_by("-date_joined")
    serializer_class = UserSerializer

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [permissions.IsAuthenticated(), IsAdminOrManager()]
        return [permissions.IsAuthenticated(), IsAdmin()]

    def create(self, request):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s created by %s", user.username, request.user.username)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None, partial=False):
        user = self.get_object()
        serializer = UserUpdateSerializer(user, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(UserSerializer(user).data)

    def partial_update(self, request, pk=None):
        return Response(
            {"error": "Use PUT with the full user payload"},
            status=status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    def destroy(self, request, pk=None):
        user = self.get_object()
        if user.pk == request.user.pk:
            return Response(
                {"error": "You cannot delete your own account"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        logger.info("User %s deleted by %s", user.username, request.user.username)
        user.delete()
        return Response({"message": "User deleted"})

    @action(detail=True, methods=["post"], url_path="toggle-status")
    def toggle_status(self, request, pk=None):
        user = self.get_object()
        if user.pk == request.user.pk:
            return Response(
                {"error": "You cannot change the status of your own account"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        user.is_active = not user.is_active
        user.save(update_fields=["is_active"])
        logger.info("User %s active=%s", user.username, user.is_active)
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=["post"], url_path="reset-password")
    def reset_password(self, request, pk=None):
        user = self.get_object()
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user.set_password(serializer.validated_data["new_password"])
        user.save(update_fields=["password"])
        logger.info("Password reset for %s by %s", user.username, request.user.username)
        return Response({"message": "Password reset"})
