import uuid

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.common.models import TimestampedModel


class PermissionCode:
    READ_COURSES = "read:courses"
    WRITE_COURSES = "write:courses"
    READ_PROFILE = "read:profile"
    WRITE_PROFILE = "write:profile"
    READ_STUDENTS = "read:students"
    WRITE_STUDENTS = "write:students"
    READ_INSTRUCTORS = "read:instructors"
    WRITE_INSTRUCTORS = "write:instructors"
    ADMIN_ALL = "admin:all"


class UserManager(BaseUserManager):
    """Define a model manager for User model with no username field."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        """Create and save a User with the given email and password."""
        if not email:
            raise ValueError("The given email must be set")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a regular User with the given email and password."""
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        """Create and save a SuperUser with the given email and password."""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    def get_by_email(self, email):
        return self.get(email__iexact=email.strip())


class User(AbstractUser, TimestampedModel):
    class Role(models.TextChoices):
        STUDENT = "STUDENT", _("Student")
        INSTRUCTOR = "INSTRUCTOR", _("Instructor")
        ADMIN = "ADMIN", _("Admin")

    ROLE_PERMISSIONS = {
        Role.STUDENT: (PermissionCode.READ_COURSES, PermissionCode.READ_PROFILE),
        Role.INSTRUCTOR: (
            PermissionCode.READ_COURSES,
            PermissionCode.WRITE_COURSES,
            PermissionCode.READ_PROFILE,
            PermissionCode.WRITE_PROFILE,
            PermissionCode.READ_STUDENTS,
        ),
        Role.ADMIN: (PermissionCode.ADMIN_ALL,),
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = None  # Use email instead
    email = models.EmailField(_("email address"), unique=True, db_index=True)
    first_name = models.CharField(_("first name"), max_length=50)
    last_name = models.CharField(_("last name"), max_length=50)

    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT)

    # Profile information, mostly relevant to instructors
    institution = models.CharField(max_length=100, blank=True)
    department = models.CharField(max_length=50, blank=True)
    specialization = models.CharField(max_length=100, blank=True)
    experience = models.CharField(max_length=200, blank=True)

    # Login security
    failed_login_attempts = models.PositiveSmallIntegerField(default=0)
    locked_until = models.DateTimeField(null=True, blank=True)
    last_active_at = models.DateTimeField(null=True, blank=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name"]

    objects = UserManager()

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["email"]

    def __str__(self):
        return self.email

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self):
        return self.is_superuser or self.role == self.Role.ADMIN

    @property
    def is_instructor(self):
        return self.role == self.Role.INSTRUCTOR

    @property
    def is_locked(self):
        return bool(self.locked_until and self.locked_until > timezone.now())

    @property
    def permission_codes(self):
        if self.is_superuser:
            return [PermissionCode.ADMIN_ALL]
        return list(self.ROLE_PERMISSIONS.get(self.role, (PermissionCode.READ_PROFILE,)))

    def has_permission_code(self, code):
        """Admins implicitly hold every permission code."""
        codes = self.permission_codes
        return PermissionCode.ADMIN_ALL in codes or code in codes
