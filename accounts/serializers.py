from django.contrib.auth.models import User
from django.db import transaction
from rest_framework import serializers

from .models import UserProfile


class UserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="profile.name", read_only=True)
    role = serializers.CharField(source="profile.role", read_only=True)
    shift_count = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "email",
            "role",
            "is_active",
            "date_joined",
            "last_login",
            "shift_count",
        ]

    def get_shift_count(self, obj):
        return obj.shifts.count()


class _UserFieldsMixin(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=20)
    name = serializers.CharField(min_length=2, max_length=120)
    email = serializers.EmailField(required=False, allow_blank=True, default="")

    def validate_username(self, value):
        qs = User.objects.filter(username__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Username already exists")
        return value

    def validate_email(self, value):
        if not value:
            return ""
        qs = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Email already exists")
        return value


class UserCreateSerializer(_UserFieldsMixin):
    password = serializers.CharField(min_length=6, write_only=True)
    role = serializers.ChoiceField(choices=UserProfile.ROLE_CHOICES)
    is_active = serializers.BooleanField(default=True)

    @transaction.atomic
    def create(self, validated_data):
        user = User.objects.create_user(
            username=validated_data["username"],
            email=validated_data.get("email", ""),
            password=validated_data["password"],
            is_active=validated_data.get("is_active", True),
        )
        profile = user.profile
        profile.name = validated_data["name"]
        profile.role = validated_data["role"]
        profile.save(update_fields=["name", "role"])
        return user


class UserUpdateSerializer(_UserFieldsMixin):
    role = serializers.ChoiceField(choices=UserProfile.ROLE_CHOICES)
    is_active = serializers.BooleanField()

    @transaction.atomic
    def update(self, instance, validated_data):
        instance.username = validated_data["username"]
        instance.email = validated_data.get("email", "")
        instance.is_active = validated_data["is_active"]
        instance.save(update_fields=["username", "email", "is_active"])
        profile = instance.profile
        profile.name = validated_data["name"]
        profile.role = validated_data["role"]
        profile.save(update_fields=["name", "role"])
        return instance


class RegisterSerializer(serializers.Serializer):
    """Self-registration; new accounts always start as USER."""
    username = serializers.CharField(min_length=3, max_length=20)
    name = serializers.CharField(min_length=2, max_length=120)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    password = serializers.CharField(min_length=6, write_only=True)
    confirm_password = serializers.CharField(write_only=True)

    def validate_username(self, value):
        if not value.replace("_", "").isalnum():
            raise serializers.ValidationError(
                "Username may contain only letters, digits and underscores"
            )
        return value

    def validate(self, attrs):
        if attrs["password"] != attrs["confirm_password"]:
            raise serializers.ValidationError({"confirm_password": ["Passwords do not match"]})
        return attrs


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)


class ResetPasswordSerializer(serializers.Serializer):
    new_password = serializers.CharField(min_length=6, write_only=True)
    confirm_password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        if attrs["new_password"] != attrs["confirm_password"]:
            raise serializers.ValidationError({"confirm_password": ["Passwords do not match"]})
        return attrs
