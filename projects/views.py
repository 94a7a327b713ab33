from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from .serializers import (
    AddMemberSerializer,
    ProjectDetailSerializer,
    ProjectMembershipSerializer,
    ProjectSerializer,
    ProjectWriteSerializer,
)
from .services import ProjectService


class ProjectListCreateView(APIView):
    """
    GET  /projects/   → projects the caller is a member of, most recently updated first
    POST /projects/   → create project + owner membership
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        projects = ProjectService.list_projects(request.user)
        return Response(ProjectSerializer(projects, many=True).data)

    def post(self, request):
        serializer = ProjectWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        project = ProjectService.create_project(request.user, **serializer.validated_data)
        return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)


class ProjectDetailView(APIView):
    """
    GET    /projects/<id>/  → members + tasks (any member)
    PATCH  /projects/<id>/  → partial update (owner/admin)
    DELETE /projects/<id>/  → delete with memberships and tasks (owner only)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, project_id):
        project = ProjectService.get_project(request.user, project_id)
        return Response(ProjectDetailSerializer(project).data)

    def patch(self, request, project_id):
        serializer = ProjectWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        project = ProjectService.update_project(request.user, project_id, serializer.validated_data)
        return Response(ProjectSerializer(project).data)

    def delete(self, request, project_id):
        ProjectService.delete_project(request.user, project_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProjectMemberAddView(APIView):
    """
    POST /projects/<id>/members/
        Body → { email, role? }   role ∈ ADMIN | MEMBER, defaults to MEMBER
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, project_id):
        serializer = AddMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        membership = ProjectService.add_member(
            request.user,
            project_id,
            email=serializer.validated_data["email"],
            role=serializer.validated_data["role"],
        )
        return Response(ProjectMembershipSerializer(membership).data, status=status.HTTP_201_CREATED)


class ProjectMemberRemoveView(APIView):
    """
    DELETE /projects/<id>/members/<user_id>/   (owner/admin; never the owner)
    """
    permission_classes = [IsAuthenticated]

    def delete(self, request, project_id, user_id):
        ProjectService.remove_member(request.user, project_id, user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
