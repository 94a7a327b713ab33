# projects/policies.py
"""
Centralized authorization layer for projects and tasks.

Every read and write path goes through here. Two rules shape everything:

1. Membership is visibility. A caller without a ProjectMembership row gets the
   same NotFound as for a project that does not exist. This check always runs
   before any role check.
2. Roles are NOT a linear hierarchy. Each action has an explicit allow-set in
   ACTION_ROLES; never compare roles with ">=".

Pure decision logic: nothing in this module writes to the database.
"""
import logging
from typing import Iterable, Optional, Tuple

from django.db.models import QuerySet

from core.exceptions import InsufficientPermissions, NotFound
from .models import Project, ProjectMembership, Role

logger = logging.getLogger("teamboard.projects.policies")


ALL_ROLES = frozenset({Role.OWNER, Role.ADMIN, Role.MEMBER})

# Action -> roles allowed to perform it on a project.
ACTION_ROLES = {
    "project.view": ALL_ROLES,
    "project.update": frozenset({Role.OWNER, Role.ADMIN}),
    "project.delete": frozenset({Role.OWNER}),
    "member.add": frozenset({Role.OWNER, Role.ADMIN}),
    "member.remove": frozenset({Role.OWNER, Role.ADMIN}),
    "task.create": ALL_ROLES,
    "task.comment": ALL_ROLES,
}

# Roles that may update/delete any task in their project, regardless of
# who created it or who it is assigned to.
TASK_MANAGER_ROLES = frozenset({Role.OWNER, Role.ADMIN})

# Roles a member can be given through add-member. OWNER is only ever
# assigned at project creation.
ASSIGNABLE_ROLES = frozenset({Role.ADMIN, Role.MEMBER})

PROJECT_NOT_FOUND = "Project not found"


class ProjectPolicy:
    """
    Membership/role checks. `membership_of` and the `can_*` methods answer
    questions; the `require_*` methods raise the matching domain error.
    """

    @staticmethod
    def membership_of(user, project_id) -> Optional[ProjectMembership]:
        """The caller's membership row on the project, or None."""
        if not user or not user.is_authenticated or project_id is None:
            return None

        return (
            ProjectMembership.objects
            .filter(project_id=project_id, user_id=user.id)
            .first()
        )

    @staticmethod
    def role_of(user, project_id) -> Optional[str]:
        membership = ProjectPolicy.membership_of(user, project_id)
        return membership.role if membership else None

    @staticmethod
    def is_member(user, project_id) -> bool:
        if not user or not user.is_authenticated or project_id is None:
            return False
        return ProjectMembership.objects.filter(project_id=project_id, user_id=user.id).exists()

    @staticmethod
    def visible_projects(user) -> QuerySet:
        """Projects the user holds any membership on."""
        return Project.objects.filter(memberships__user_id=user.id)

    # ─────────────────────────────────────────────────────────────
    # Raising checks
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def require_member(user, project_id, message: str = PROJECT_NOT_FOUND) -> ProjectMembership:
        """Fail with NotFound if the caller has no membership on the project."""
        membership = ProjectPolicy.membership_of(user, project_id)
        if membership is None:
            logger.warning(
                "Visibility denied: user=%s project=%s",
                getattr(user, "id", None), project_id,
            )
            raise NotFound(message)
        return membership

    @staticmethod
    def require_role(user, project_id, allowed_roles: Iterable[str], message: Optional[str] = None) -> ProjectMembership:
        """
        Membership first (NotFound), then role (InsufficientPermissions).
        """
        membership = ProjectPolicy.require_member(user, project_id)
        if membership.role not in frozenset(allowed_roles):
            logger.warning(
                "Permission denied: user=%s project=%s role=%s allowed=%s",
                user.id, project_id, membership.role, sorted(allowed_roles),
            )
            raise InsufficientPermissions(message)
        return membership

    @staticmethod
    def require_action(user, project_id, action: str, message: Optional[str] = None) -> ProjectMembership:
        return ProjectPolicy.require_role(user, project_id, ACTION_ROLES[action], message)

    # ─────────────────────────────────────────────────────────────
    # Task-level decisions
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def can_modify_task(user, task, role: Optional[str] = None) -> Tuple[bool, str]:
        """Creator, assignee, or project OWNER/ADMIN may update a task."""
        if role is None:
            role = ProjectPolicy.role_of(user, task.project_id)

        if role is None:
            return False, "Task not found"

        if task.created_by_id == user.id:
            return True, ""

        if task.assigned_to_id is not None and task.assigned_to_id == user.id:
            return True, ""

        if role in TASK_MANAGER_ROLES:
            return True, ""

        return False, "Insufficient permissions to update this task"

    @staticmethod
    def can_delete_task(user, task, role: Optional[str] = None) -> Tuple[bool, str]:
        """Creator or project OWNER/ADMIN. Being the assignee is not enough."""
        if role is None:
            role = ProjectPolicy.role_of(user, task.project_id)

        if role is None:
            return False, "Task not found"

        if task.created_by_id == user.id:
            return True, ""

        if role in TASK_MANAGER_ROLES:
            return True, ""

        return False, "Insufficient permissions to delete this task"
