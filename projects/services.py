import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Prefetch

from core.exceptions import AlreadyMember, CannotRemoveOwner, NotFound, UserNotFound
from tasks.models import Task
from .models import Project, ProjectMembership, Role
from .policies import ProjectPolicy

User = get_user_model()
logger = logging.getLogger("teamboard.projects")

UPDATABLE_FIELDS = ("name", "description", "color")


def _project_rows(queryset):
    """Projects as listed: creator, members and task_count loaded."""
    return (
        queryset
        .select_related("created_by")
        .prefetch_related(
            Prefetch(
                "memberships",
                queryset=ProjectMembership.objects.select_related("user").order_by("joined_at", "id"),
            )
        )
        .annotate(task_count=Count("tasks", distinct=True))
    )


class ProjectService:
    """
    Project CRUD + membership management. Input is already validated by the
    view serializers; every method authorizes through ProjectPolicy first.
    """

    @staticmethod
    @transaction.atomic
    def create_project(user, name, description=None, color=None) -> Project:
        # Project row and OWNER membership commit together or not at all.
        project = Project.objects.create(
            name=name,
            description=description,
            color=color,
            created_by=user,
        )
        ProjectMembership.objects.create(
            project=project,
            user=user,
            role=Role.OWNER,
        )
        logger.info("User %s created project %s", user.id, project.id)
        return project

    @staticmethod
    def list_projects(user):
        return _project_rows(ProjectPolicy.visible_projects(user)).order_by("-updated_at", "-id")

    @staticmethod
    def get_project(user, project_id) -> Project:
        ProjectPolicy.require_member(user, project_id)

        tasks = (
            Task.objects
            .select_related("assigned_to")
            .prefetch_related("tags")
            .order_by("-created_at", "-id")
        )
        project = (
            Project.objects
            .select_related("created_by")
            .prefetch_related(
                Prefetch(
                    "memberships",
                    queryset=ProjectMembership.objects.select_related("user").order_by("joined_at", "id"),
                ),
                Prefetch("tasks", queryset=tasks),
            )
            .filter(pk=project_id)
            .first()
        )
        if project is None:
            # Membership existed a moment ago; the project was deleted since.
            raise NotFound("Project not found")
        return project

    @staticmethod
    @transaction.atomic
    def update_project(user, project_id, fields: dict) -> Project:
        ProjectPolicy.require_action(user, project_id, "project.update")

        project = Project.objects.select_for_update().get(pk=project_id)
        changed = [name for name in UPDATABLE_FIELDS if name in fields]
        for name in changed:
            setattr(project, name, fields[name])
        project.save()

        logger.info("User %s updated project %s fields=%s", user.id, project.id, changed)
        return _project_rows(Project.objects.filter(pk=project.pk)).get()

    @staticmethod
    @transaction.atomic
    def delete_project(user, project_id) -> None:
        ProjectPolicy.require_action(
            user, project_id, "project.delete",
            message="Only project owners can delete projects",
        )

        # Memberships, tasks (and their comments/tag links) go via on_delete=CASCADE.
        deleted, per_model = Project.objects.filter(pk=project_id).delete()
        logger.info("User %s deleted project %s (%s rows: %s)", user.id, project_id, deleted, per_model)

    @staticmethod
    @transaction.atomic
    def add_member(user, project_id, email, role=Role.MEMBER) -> ProjectMembership:
        ProjectPolicy.require_action(user, project_id, "member.add")

        target = User.objects.filter(email__iexact=email).first()
        if target is None:
            raise UserNotFound()

        if ProjectMembership.objects.filter(project_id=project_id, user=target).exists():
            raise AlreadyMember()

        try:
            with transaction.atomic():
                membership = ProjectMembership.objects.create(
                    project_id=project_id,
                    user=target,
                    role=role,
                )
        except IntegrityError:
            # Lost a race with a concurrent add of the same user.
            raise AlreadyMember()

        logger.info("User %s added user %s to project %s as %s", user.id, target.id, project_id, role)
        return membership

    @staticmethod
    @transaction.atomic
    def remove_member(user, project_id, target_user_id) -> None:
        ProjectPolicy.require_action(user, project_id, "member.remove")

        membership = ProjectMembership.objects.filter(
            project_id=project_id,
            user_id=target_user_id,
        ).first()

        if membership is None:
            raise NotFound("Member not found")

        if membership.role == Role.OWNER:
            raise CannotRemoveOwner()

        membership.delete()
        logger.info("User %s removed user %s from project %s", user.id, target_user_id, project_id)
