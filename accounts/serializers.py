import re
from rest_framework import serializers
from django.contrib.auth.models import User

HANDLE_RE = re.compile(r"^[a-z0-9]{2,32}$")


def normalize_handle(value):
    """Strip whitespace, lowercase, keep only a-z and 0-9."""
    return re.sub(r"[^a-z0-9]", "", re.sub(r"\s", "", value or "").lower())


class HandleField(serializers.CharField):
    default_error_messages = {
        "handle": "Username must be 2-32 characters, lowercase letters and numbers only",
    }

    def to_internal_value(self, data):
        value = normalize_handle(super().to_internal_value(data))
        if not HANDLE_RE.match(value):
            self.fail("handle")
        return value


class RegisterSerializer(serializers.Serializer):
    username = HandleField()
    password = serializers.CharField(write_only=True, min_length=8, max_length=128, trim_whitespace=True)

    def validate_username(self, value):
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError("Username already taken")
        return value

    def create(self, validated_data):
        return User.objects.create_user(username=validated_data["username"], password=validated_data["password"])


class ProfileUpdateSerializer(serializers.Serializer):
    username = HandleField()

    def validate_username(self, value):
        user = self.context["request"].user
        if User.objects.exclude(pk=user.pk).filter(username=value).exists():
            raise serializers.ValidationError("Username already taken")
        return value


class FriendInviteCreateSerializer(serializers.Serializer):
    username = HandleField(required=False)
    userId = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):
        if not attrs.get("username") and not attrs.get("userId"):
            raise serializers.ValidationError("Provide username or userId")
        return attrs


class UserSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="date_joined", read_only=True)

    class Meta:
        model = User
        fields = ("id", "username", "createdAt")
