# accounts/models.py
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.utils import timezone
from .managers import CustomUserManager


class Role(models.TextChoices):
    USER = 'user', 'User'
    BROKER = 'broker', 'Broker'
    DEVELOPER = 'developer', 'Developer'
    ADMIN = 'admin', 'Admin'
    SUPERADMIN = 'superadmin', 'Super Admin'


class User(AbstractBaseUser, PermissionsMixin):
    email = models.EmailField(unique=True)
    username = models.CharField(max_length=150, unique=True)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    phone_number = models.CharField(max_length=20, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    # only the most recently issued token is accepted
    current_token_user = models.CharField(max_length=512, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = CustomUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username', 'first_name', 'last_name']

    def get_unread_notifications(self):
        return self.user_notifications.filter(is_read=False)

    def mark_all_notifications_read(self):
        return self.user_notifications.filter(is_read=False).update(is_read=True, read_at=timezone.now())

    @property
    def is_admin(self):
        return self.role in (Role.ADMIN, Role.SUPERADMIN)

    def __str__(self):
        return self.email
