from django.urls import path

from .views import (
    ProjectDetailView,
    ProjectListCreateView,
    ProjectMemberAddView,
    ProjectMemberRemoveView,
)

urlpatterns = [
    path("", ProjectListCreateView.as_view(), name="projects-list-create"),
    path("<int:project_id>/", ProjectDetailView.as_view(), name="project-detail"),
    path("<int:project_id>/members/", ProjectMemberAddView.as_view(), name="project-add-member"),
    path(
        "<int:project_id>/members/<int:user_id>/",
        ProjectMemberRemoveView.as_view(),
        name="project-remove-member",
    ),
]
