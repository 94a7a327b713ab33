import logging

from django.db import transaction
from django.db.models import Case, Count, F, IntegerField, Prefetch, Q, Value, When
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from core.exceptions import AssigneeNotMember, InsufficientPermissions, NotFound
from projects.models import ProjectMembership
from projects.policies import ProjectPolicy
from .models import (
    PRIORITY_ORDER,
    STATUS_ORDER,
    Tag,
    Task,
    TaskComment,
    TaskPriority,
    TaskStatus,
)

logger = logging.getLogger("teamboard.tasks")

TASK_NOT_FOUND = "Task not found"

UPDATABLE_FIELDS = ("title", "description", "status", "priority", "due_date")


def _rank(field: str, order) -> Case:
    """Map an enum column to its declaration index so it sorts by meaning."""
    return Case(
        *[When(**{field: value}, then=Value(index)) for index, value in enumerate(order)],
        output_field=IntegerField(),
    )


def order_tasks(queryset):
    """
    Fixed listing order: status asc, priority desc, due date asc with undated
    last, newest first. The trailing -id keeps rows created in the same
    instant stable.
    """
    return queryset.annotate(
        status_rank=_rank("status", STATUS_ORDER),
        priority_rank=_rank("priority", PRIORITY_ORDER),
    ).order_by(
        "status_rank",
        "-priority_rank",
        F("due_date").asc(nulls_last=True),
        "-created_at",
        "-id",
    )


def _task_rows(queryset):
    """Tasks as listed: related rows loaded and comment_count annotated."""
    return (
        queryset
        .select_related("created_by", "assigned_to", "project")
        .prefetch_related("tags")
        .annotate(comment_count=Count("comments", distinct=True))
    )


def _require_assignee_member(project_id, assignee_id) -> None:
    if not ProjectMembership.objects.filter(project_id=project_id, user_id=assignee_id).exists():
        logger.warning("Assignee %s is not a member of project %s", assignee_id, project_id)
        raise AssigneeNotMember()


def _resolve_tags(tag_ids):
    wanted = set(tag_ids)
    tags = list(Tag.objects.filter(id__in=wanted))
    missing = wanted - {tag.id for tag in tags}
    if missing:
        raise ValidationError({"tag_ids": [f"Unknown tag ids: {', '.join(str(i) for i in sorted(missing))}"]})
    return tags


class TaskService:

    @staticmethod
    def visible_tasks(user):
        """Tasks in projects the user is a member of."""
        return Task.objects.filter(project__memberships__user_id=user.id)

    @staticmethod
    def get_visible_task(user, task_id, for_update=False) -> Task:
        queryset = TaskService.visible_tasks(user)
        if for_update:
            queryset = queryset.select_for_update(of=("self",))
        task = queryset.filter(pk=task_id).first()
        if task is None:
            logger.warning("Task visibility denied: user=%s task=%s", user.id, task_id)
            raise NotFound(TASK_NOT_FOUND)
        return task

    @staticmethod
    @transaction.atomic
    def create_task(
        user,
        project_id,
        title,
        description=None,
        assigned_to_id=None,
        priority=TaskPriority.MEDIUM,
        due_date=None,
        tag_ids=None,
    ) -> Task:
        ProjectPolicy.require_action(user, project_id, "task.create")

        if assigned_to_id is not None:
            _require_assignee_member(project_id, assigned_to_id)

        tags = _resolve_tags(tag_ids) if tag_ids else []

        task = Task.objects.create(
            title=title,
            description=description,
            project_id=project_id,
            created_by=user,
            assigned_to_id=assigned_to_id,
            priority=priority,
            due_date=due_date,
        )
        if tags:
            task.tags.set(tags)

        logger.info("User %s created task %s in project %s", user.id, task.id, project_id)
        return task

    @staticmethod
    def list_tasks(user, project_id=None, status=None, assigned_to_me=False):
        if project_id is not None:
            ProjectPolicy.require_member(user, project_id)
            queryset = Task.objects.filter(project_id=project_id)
        else:
            queryset = TaskService.visible_tasks(user)

        if status:
            queryset = queryset.filter(status=status)

        if assigned_to_me:
            queryset = queryset.filter(assigned_to_id=user.id)

        return order_tasks(_task_rows(queryset))

    @staticmethod
    def get_task(user, task_id) -> Task:
        TaskService.get_visible_task(user, task_id)
        return (
            Task.objects
            .select_related("created_by", "assigned_to", "project")
            .prefetch_related(
                "tags",
                Prefetch(
                    "comments",
                    queryset=TaskComment.objects.select_related("author").order_by("created_at", "id"),
                ),
            )
            .get(pk=task_id)
        )

    @staticmethod
    @transaction.atomic
    def update_task(user, task_id, fields: dict) -> Task:
        task = TaskService.get_visible_task(user, task_id, for_update=True)

        allowed, reason = ProjectPolicy.can_modify_task(user, task)
        if not allowed:
            logger.warning("User %s denied update of task %s", user.id, task_id)
            raise InsufficientPermissions(reason)

        changed = [name for name in UPDATABLE_FIELDS if name in fields]
        for name in changed:
            setattr(task, name, fields[name])

        if "assigned_to_id" in fields:
            assignee_id = fields["assigned_to_id"]
            if assignee_id is not None:
                _require_assignee_member(task.project_id, assignee_id)
            task.assigned_to_id = assignee_id
            changed.append("assigned_to_id")

        task.save()

        if "tag_ids" in fields:
            task.tags.set(_resolve_tags(fields["tag_ids"] or []))
            changed.append("tag_ids")

        logger.info("User %s updated task %s fields=%s", user.id, task.id, changed)
        return _task_rows(Task.objects.filter(pk=task.pk)).get()

    @staticmethod
    @transaction.atomic
    def delete_task(user, task_id) -> None:
        task = TaskService.get_visible_task(user, task_id, for_update=True)

        allowed, reason = ProjectPolicy.can_delete_task(user, task)
        if not allowed:
            logger.warning("User %s denied delete of task %s", user.id, task_id)
            raise InsufficientPermissions(reason)

        task.delete()
        logger.info("User %s deleted task %s", user.id, task_id)

    @staticmethod
    @transaction.atomic
    def add_comment(user, task_id, content) -> TaskComment:
        task = TaskService.get_visible_task(user, task_id)
        ProjectPolicy.require_action(user, task.project_id, "task.comment")

        comment = TaskComment.objects.create(task=task, author=user, content=content)
        logger.info("User %s commented on task %s", user.id, task.id)
        return comment

    @staticmethod
    def get_stats(user, project_id=None) -> dict:
        queryset = TaskService.visible_tasks(user)
        if project_id is not None:
            ProjectPolicy.require_member(user, project_id)
            queryset = queryset.filter(project_id=project_id)

        now = timezone.now()
        return queryset.aggregate(
            total_tasks=Count("id"),
            todo_tasks=Count("id", filter=Q(status=TaskStatus.TODO)),
            in_progress_tasks=Count("id", filter=Q(status=TaskStatus.IN_PROGRESS)),
            in_review_tasks=Count("id", filter=Q(status=TaskStatus.IN_REVIEW)),
            done_tasks=Count("id", filter=Q(status=TaskStatus.DONE)),
            my_tasks=Count("id", filter=Q(assigned_to_id=user.id)),
            overdue_tasks=Count("id", filter=Q(due_date__lt=now) & ~Q(status=TaskStatus.DONE)),
        )
