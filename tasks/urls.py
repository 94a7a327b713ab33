from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    TagViewSet,
    TaskCommentCreateView,
    TaskDetailView,
    TaskListCreateView,
    TaskStatsView,
)

router = DefaultRouter()
router.register(r'tags', TagViewSet, basename='tag')

urlpatterns = [
    path("tasks/", TaskListCreateView.as_view(), name="tasks-list-create"),
    path("tasks/stats/", TaskStatsView.as_view(), name="task-stats"),
    path("tasks/<int:task_id>/", TaskDetailView.as_view(), name="task-detail"),
    path("tasks/<int:task_id>/comments/", TaskCommentCreateView.as_view(), name="task-add-comment"),
    path('', include(router.urls)),
]
