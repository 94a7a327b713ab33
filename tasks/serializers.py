from rest_framework import serializers

from projects.models import Project
from users.serializers import UserSummarySerializer
from .models import DEFAULT_TAG_COLOR, Tag, Task, TaskComment, TaskPriority, TaskStatus


# ---- Output -----------------------------------------------------------


class TagSerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=1, max_length=50)
    color = serializers.CharField(max_length=32, default=DEFAULT_TAG_COLOR)

    class Meta:
        model = Tag
        fields = ['id', 'name', 'color']


class ProjectSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = ['id', 'name', 'color']


class TaskCommentSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = TaskComment
        fields = ['id', 'task_id', 'content', 'author', 'created_at']


class TaskSerializer(serializers.ModelSerializer):
    """Row of the task list."""
    project = ProjectSummarySerializer(read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    tags = TagSerializer(many=True, read_only=True)
    comment_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Task
        fields = [
            'id',
            'title',
            'description',
            'status',
            'priority',
            'due_date',
            'project',
            'created_by',
            'assigned_to',
            'tags',
            'comment_count',
            'created_at',
            'updated_at',
        ]


class TaskDetailSerializer(TaskSerializer):
    comments = TaskCommentSerializer(many=True, read_only=True)

    class Meta(TaskSerializer.Meta):
        fields = [f for f in TaskSerializer.Meta.fields if f != 'comment_count'] + ['comments']


class ProjectTaskSerializer(serializers.ModelSerializer):
    """Task as embedded in a project detail payload."""
    assigned_to = UserSummarySerializer(read_only=True)
    tags = TagSerializer(many=True, read_only=True)

    class Meta:
        model = Task
        fields = [
            'id',
            'title',
            'description',
            'status',
            'priority',
            'due_date',
            'created_by_id',
            'assigned_to',
            'tags',
            'created_at',
            'updated_at',
        ]


# ---- Input ------------------------------------------------------------


class TaskCreateSerializer(serializers.Serializer):
    title = serializers.CharField(min_length=1, max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    project_id = serializers.IntegerField(min_value=1)
    assigned_to_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    priority = serializers.ChoiceField(choices=TaskPriority.choices, default=TaskPriority.MEDIUM)
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    tag_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False)


class TaskUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(min_length=1, max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=TaskStatus.choices, required=False)
    priority = serializers.ChoiceField(choices=TaskPriority.choices, required=False)
    assigned_to_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    tag_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False)


class TaskFilterSerializer(serializers.Serializer):
    project_id = serializers.IntegerField(required=False, min_value=1)
    status = serializers.ChoiceField(choices=TaskStatus.choices, required=False)
    assigned_to_me = serializers.BooleanField(required=False, default=False)


class TaskStatsQuerySerializer(serializers.Serializer):
    project_id = serializers.IntegerField(required=False, min_value=1)


class CommentCreateSerializer(serializers.Serializer):
    content = serializers.CharField(min_length=1)
