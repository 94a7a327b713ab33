from rest_framework import serializers
from .models import User


class UserSummarySerializer(serializers.ModelSerializer):
    """Public subset of a user embedded in project/task payloads."""

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'image']


class ProfileSerializer(serializers.ModelSerializer):
    created_projects_count = serializers.IntegerField(source='created_projects.count', read_only=True)
    memberships_count = serializers.IntegerField(source='project_memberships.count', read_only=True)
    created_tasks_count = serializers.IntegerField(source='created_tasks.count', read_only=True)
    assigned_tasks_count = serializers.IntegerField(source='assigned_tasks.count', read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'name',
            'email',
            'image',
            'bio',
            'title',
            'department',
            'date_joined',
            'created_projects_count',
            'memberships_count',
            'created_tasks_count',
            'assigned_tasks_count',
        ]
        read_only_fields = ['id', 'email', 'date_joined']


class UpdateProfileSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=255, required=False, allow_blank=False)

    class Meta:
        model = User
        fields = ['name', 'image', 'bio', 'title', 'department']


class UserSearchSerializer(serializers.Serializer):
    query = serializers.CharField(min_length=1, max_length=255)
