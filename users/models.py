# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Identity record. Credentials live in AbstractUser.password (hashed);
    everything below is plain profile data.
    """
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True, default="")
    image = models.CharField(max_length=1024, blank=True, null=True)

    # Profile
    bio = models.TextField(blank=True, null=True)
    title = models.CharField(max_length=100, blank=True, null=True, help_text="Job title / role in the team")
    department = models.CharField(max_length=100, blank=True, null=True)

    def __str__(self):
        return self.name or self.email
