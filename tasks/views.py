import logging

from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Tag
from .serializers import (
    CommentCreateSerializer,
    TagSerializer,
    TaskCommentSerializer,
    TaskCreateSerializer,
    TaskDetailSerializer,
    TaskFilterSerializer,
    TaskSerializer,
    TaskStatsQuerySerializer,
    TaskUpdateSerializer,
)
from .services import TaskService

logger = logging.getLogger("teamboard.tasks")


class TaskListCreateView(APIView):
    """
    GET  /tasks/?project_id=&status=&assigned_to_me=   → tasks in my projects
    POST /tasks/                                       → create a task (any member)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        filters = TaskFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        tasks = TaskService.list_tasks(request.user, **filters.validated_data)
        return Response(TaskSerializer(tasks, many=True).data)

    def post(self, request):
        serializer = TaskCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        task = TaskService.create_task(request.user, **serializer.validated_data)
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


class TaskDetailView(APIView):
    """
    GET    /tasks/<id>/  → task with comments oldest first
    PATCH  /tasks/<id>/  → creator, assignee or project owner/admin
    DELETE /tasks/<id>/  → creator or project owner/admin
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, task_id):
        task = TaskService.get_task(request.user, task_id)
        return Response(TaskDetailSerializer(task).data)

    def patch(self, request, task_id):
        serializer = TaskUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        task = TaskService.update_task(request.user, task_id, serializer.validated_data)
        return Response(TaskSerializer(task).data)

    def delete(self, request, task_id):
        TaskService.delete_task(request.user, task_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TaskCommentCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, task_id):
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = TaskService.add_comment(request.user, task_id, serializer.validated_data["content"])
        return Response(TaskCommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class TaskStatsView(APIView):
    """
    GET /tasks/stats/?project_id=   → counts by status, mine, overdue
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        params = TaskStatsQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        return Response(TaskService.get_stats(request.user, **params.validated_data))


class TagViewSet(viewsets.ModelViewSet):
    """
    Global tag vocabulary.
    - List: ordered by name
    - Create / update / delete: any authenticated user
    """
    queryset = Tag.objects.all().order_by("name", "id")
    serializer_class = TagSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def perform_create(self, serializer):
        tag = serializer.save()
        logger.info("User %s created tag %s", self.request.user.id, tag.id)

    def perform_update(self, serializer):
        tag = serializer.save()
        logger.info("User %s updated tag %s", self.request.user.id, tag.id)

    def perform_destroy(self, instance):
        logger.info("User %s deleted tag %s", self.request.user.id, instance.id)
        instance.delete()
