from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class UserQuerySet(models.QuerySet):
    def doctors(self):
        return self.filter(role=User.ROLE_DOCTOR)

    def active_doctors(self):
        return self.doctors().filter(is_active=True).order_by('first_name', 'last_name', 'username')


class ClinicUserManager(UserManager.from_queryset(UserQuerySet)):
    pass


class User(AbstractUser):
    ROLE_ADMIN = 'admin'
    ROLE_RECEPTIONIST = 'receptionist'
    ROLE_DOCTOR = 'doctor'

    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_RECEPTIONIST, 'Receptionist'),
        (ROLE_DOCTOR, 'Doctor'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_RECEPTIONIST)
    phone = models.CharField(max_length=20, blank=True)
    specialization = models.CharField(max_length=100, blank=True)

    objects = ClinicUserManager()

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    def __str__(self):
        return f"{self.display_name} ({self.role})"
