from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import exceptions, serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .services import AccountLocked, AuthService

User = get_user_model()


class UserBasicSerializer(serializers.ModelSerializer):
    """Lightweight user serializer for nested representations."""

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ("id", "email", "first_name", "last_name", "full_name", "role")
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    permissions = serializers.ListField(
        source="permission_codes", child=serializers.CharField(), read_only=True
    )

    class Meta:
        model = User
        fields = (
            "id", "email", "first_name", "last_name", "full_name", "role",
            "permissions", "institution", "department", "specialization",
            "experience", "is_active", "last_login", "last_active_at",
            "date_joined",
        )
        read_only_fields = (
            "id", "email", "role", "permissions", "is_active", "last_login",
            "last_active_at", "date_joined",
        )
        extra_kwargs = {
            "first_name": {"min_length": 2},
            "last_name": {"min_length": 2},
        }


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=True, style={"input_type": "password"})
    password2 = serializers.CharField(write_only=True, required=True, label="Confirm password", style={"input_type": "password"})
    role = serializers.ChoiceField(
        choices=[User.Role.STUDENT, User.Role.INSTRUCTOR], default=User.Role.STUDENT
    )

    class Meta:
        model = User
        fields = (
            "email", "first_name", "last_name", "password", "password2", "role",
            "institution", "department", "specialization", "experience",
        )
        extra_kwargs = {
            "first_name": {"required": True, "min_length": 2},
            "last_name": {"required": True, "min_length": 2},
        }

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with that email already exists.")
        return value

    def validate(self, attrs):
        if attrs["password"] != attrs["password2"]:
            raise serializers.ValidationError({"password2": "Password fields didn't match."})

        temp_user_data = {k: v for k, v in attrs.items() if k not in ("password", "password2")}
        try:
            validate_password(attrs["password"], user=User(**temp_user_data))
        except DjangoValidationError as e:
            raise serializers.ValidationError({"password": list(e.messages)})
        return attrs

    def create(self, validated_data):
        return AuthService.register_user(validated_data)


class LoginSerializer(TokenObtainPairSerializer):
    """
    Email/password login. Enforces the account lockout policy and adds role
    claims plus the serialized user to the token response.
    """

    default_error_messages = {
        "no_active_account": "Invalid email or password.",
    }

    @classmethod
    def get_token(cls, user):
        return AuthService.add_claims(super().get_token(user), user)

    def validate(self, attrs):
        email = attrs.get(self.username_field, "").strip().lower()
        attrs[self.username_field] = email

        user = User.objects.filter(email__iexact=email).first()
        if user is not None:
            try:
                AuthService.ensure_not_locked(user)
            except AccountLocked as e:
                raise exceptions.AuthenticationFailed(e.message, code=e.code)

        try:
            data = super().validate(attrs)
        except exceptions.AuthenticationFailed:
            if user is not None and user.is_active:
                AuthService.register_failed_login(user)
            raise

        AuthService.register_successful_login(self.user)
        data["user"] = UserSerializer(self.user).data
        return data


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class ChangePasswordSerializer(serializers.Serializer):
    old_password = serializers.CharField(required=True, write_only=True, style={"input_type": "password"})
    new_password = serializers.CharField(required=True, write_only=True, style={"input_type": "password"})
    new_password2 = serializers.CharField(required=True, write_only=True, label="Confirm new password", style={"input_type": "password"})

    def validate_old_password(self, value):
        user = self.context["request"].user
        if not user.check_password(value):
            raise serializers.ValidationError("Your old password was entered incorrectly. Please enter it again.")
        return value

    def validate(self, attrs):
        if attrs["new_password"] != attrs["new_password2"]:
            raise serializers.ValidationError({"new_password2": "Password fields didn't match."})
        try:
            validate_password(attrs["new_password"], user=self.context["request"].user)
        except DjangoValidationError as e:
            raise serializers.ValidationError({"new_password": list(e.messages)})
        return attrs

    def save(self, **kwargs):
        return AuthService.change_password(
            self.context["request"].user, self.validated_data["new_password"]
        )


class DeleteAccountSerializer(serializers.Serializer):
    password = serializers.CharField(required=True, write_only=True, style={"input_type": "password"})

    def validate_password(self, value):
        if not self.context["request"].user.check_password(value):
            raise serializers.ValidationError("Incorrect password.")
        return value
