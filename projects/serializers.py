from rest_framework import serializers

from tasks.serializers import ProjectTaskSerializer
from users.serializers import UserSummarySerializer
from .models import Project, ProjectMembership, Role
from .policies import ASSIGNABLE_ROLES


class ProjectMembershipSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = ProjectMembership
        fields = ['id', 'project_id', 'role', 'joined_at', 'user']


class ProjectSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    members = ProjectMembershipSerializer(source='memberships', many=True, read_only=True)
    task_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Project
        fields = [
            'id',
            'name',
            'description',
            'color',
            'created_by',
            'members',
            'task_count',
            'created_at',
            'updated_at',
        ]


class ProjectDetailSerializer(ProjectSerializer):
    tasks = ProjectTaskSerializer(many=True, read_only=True)

    class Meta(ProjectSerializer.Meta):
        fields = [f for f in ProjectSerializer.Meta.fields if f != 'task_count'] + ['tasks']


class ProjectWriteSerializer(serializers.Serializer):
    """Create (all rules) and update (partial=True) payload."""
    name = serializers.CharField(min_length=1, max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    color = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)


class AddMemberSerializer(serializers.Serializer):
    email = serializers.EmailField()
    role = serializers.ChoiceField(
        choices=[(role.value, role.label) for role in Role if role in ASSIGNABLE_ROLES],
        default=Role.MEMBER,
    )
