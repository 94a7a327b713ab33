from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from projects.models import ProjectMembership, Role
from projects.services import ProjectService
from tasks.models import Task, TaskComment, TaskPriority, TaskStatus
from tasks.services import TaskService

User = get_user_model()


class TaskListingTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.alice = User.objects.create_user(username="alice", email="alice@example.com", password="pass1234")
        self.bob = User.objects.create_user(username="bob", email="bob@example.com", password="pass1234")

        self.project = ProjectService.create_project(self.alice, name="Listing")
        ProjectMembership.objects.create(project=self.project, user=self.bob, role=Role.MEMBER)
        self.other_project = ProjectService.create_project(self.bob, name="Bob only")

        self.client.force_authenticate(user=self.alice)
        self.url = reverse("tasks-list-create")

    def _task(self, title, project=None, **extra):
        return Task.objects.create(
            project=project or self.project,
            title=title,
            created_by=self.alice,
            **extra,
        )

    def test_fixed_ordering(self):
        now = timezone.now()
        self._task("g", status=TaskStatus.DONE, priority=TaskPriority.URGENT)
        self._task("f", status=TaskStatus.IN_PROGRESS, priority=TaskPriority.LOW)
        older = self._task("d", priority=TaskPriority.HIGH)
        newer = self._task("e", priority=TaskPriority.HIGH)
        self._task("c", priority=TaskPriority.HIGH, due_date=now + timedelta(days=2))
        self._task("b", priority=TaskPriority.HIGH, due_date=now + timedelta(days=1))
        self._task("a", priority=TaskPriority.URGENT)
        self._task("h", status=TaskStatus.IN_REVIEW, priority=TaskPriority.MEDIUM)

        # undated HIGH tasks fall back to newest created first
        Task.objects.filter(pk=older.pk).update(created_at=now - timedelta(hours=2))
        Task.objects.filter(pk=newer.pk).update(created_at=now - timedelta(hours=1))

        expected = ["a", "b", "c", "e", "d", "f", "h", "g"]

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([t["title"] for t in response.data], expected)

        # and it is stable across calls
        again = self.client.get(self.url)
        self.assertEqual([t["title"] for t in again.data], expected)

    def test_list_only_covers_my_projects(self):
        self._task("mine")
        self._task("hidden", project=self.other_project)

        response = self.client.get(self.url)
        self.assertEqual([t["title"] for t in response.data], ["mine"])

    def test_filters(self):
        self._task("todo")
        self._task("done", status=TaskStatus.DONE)
        self._task("for me", assigned_to=self.alice, status=TaskStatus.IN_PROGRESS)

        response = self.client.get(self.url, {"status": "DONE"})
        self.assertEqual([t["title"] for t in response.data], ["done"])

        response = self.client.get(self.url, {"assigned_to_me": "true"})
        self.assertEqual([t["title"] for t in response.data], ["for me"])

        response = self.client.get(self.url, {"project_id": self.project.id, "status": "TODO"})
        self.assertEqual([t["title"] for t in response.data], ["todo"])

    def test_project_filter_requires_membership(self):
        self.client.force_authenticate(user=User.objects.create_user(
            username="carol", email="carol@example.com", password="pass1234",
        ))

        response = self.client.get(self.url, {"project_id": self.project.id})
        self.assertEqual(response.status_code, 404)

    def test_bad_status_filter_rejected(self):
        response = self.client.get(self.url, {"status": "LATER"})
        self.assertEqual(response.status_code, 400)

    def test_list_rows_carry_comment_count(self):
        task = self._task("chatty")
        TaskComment.objects.create(task=task, author=self.alice, content="one")
        TaskComment.objects.create(task=task, author=self.bob, content="two")

        response = self.client.get(self.url)
        self.assertEqual(response.data[0]["comment_count"], 2)
        self.assertEqual(response.data[0]["project"]["name"], "Listing")


class TaskStatsTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.alice = User.objects.create_user(username="alice", email="alice@example.com", password="pass1234")
        self.bob = User.objects.create_user(username="bob", email="bob@example.com", password="pass1234")

        self.project = ProjectService.create_project(self.alice, name="Stats")
        ProjectMembership.objects.create(project=self.project, user=self.bob, role=Role.MEMBER)
        self.side_project = ProjectService.create_project(self.alice, name="Side")
        self.bob_project = ProjectService.create_project(self.bob, name="Bob only")

        self.url = reverse("task-stats")
        self.client.force_authenticate(user=self.alice)

    def _task(self, project=None, **extra):
        return Task.objects.create(
            project=project or self.project,
            title="t",
            created_by=self.bob,
            **extra,
        )

    def test_counts_across_visible_projects(self):
        past = timezone.now() - timedelta(days=1)
        future = timezone.now() + timedelta(days=1)

        self._task(status=TaskStatus.TODO, due_date=past, assigned_to=self.alice)
        self._task(status=TaskStatus.IN_PROGRESS, due_date=future)
        self._task(status=TaskStatus.IN_REVIEW, assigned_to=self.alice)
        self._task(status=TaskStatus.DONE, due_date=past)
        self._task(project=self.side_project, status=TaskStatus.TODO)
        self._task(project=self.bob_project, status=TaskStatus.TODO, due_date=past)

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.data,
            {
                "total_tasks": 5,
                "todo_tasks": 2,
                "in_progress_tasks": 1,
                "in_review_tasks": 1,
                "done_tasks": 1,
                "my_tasks": 2,
                "overdue_tasks": 1,
            },
        )

    def test_counts_scoped_to_project(self):
        self._task()
        self._task(project=self.side_project)

        response = self.client.get(self.url, {"project_id": self.side_project.id})
        self.assertEqual(response.data["total_tasks"], 1)

    def test_stats_for_foreign_project_is_not_found(self):
        response = self.client.get(self.url, {"project_id": self.bob_project.id})
        self.assertEqual(response.status_code, 404)

    def test_empty_stats_are_zero(self):
        stats = TaskService.get_stats(self.alice)
        self.assertEqual(set(stats.values()), {0})


class RoadmapFlowTestCase(TestCase):
    """Owner creates a project, invites a member, they hand a task back and forth."""

    def test_roadmap_flow(self):
        client = APIClient()
        alice = User.objects.create_user(username="alice", email="alice@example.com", password="pass1234")
        bob = User.objects.create_user(username="bob", email="bob@example.com", password="pass1234")

        client.force_authenticate(user=alice)
        response = client.post(reverse("projects-list-create"), {"name": "Roadmap"}, format="json")
        self.assertEqual(response.status_code, 201)
        project_id = response.data["id"]
        self.assertEqual(response.data["members"][0]["role"], "OWNER")

        response = client.post(
            reverse("project-add-member", kwargs={"project_id": project_id}),
            {"email": "bob@example.com", "role": "MEMBER"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)

        client.force_authenticate(user=bob)
        response = client.post(
            reverse("tasks-list-create"),
            {"title": "Write spec", "project_id": project_id, "assigned_to_id": alice.id},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        task_id = response.data["id"]

        client.force_authenticate(user=alice)
        response = client.patch(
            reverse("task-detail", kwargs={"task_id": task_id}), {"status": "DONE"}, format="json"
        )
        self.assertEqual(response.status_code, 200)

        response = client.get(reverse("task-stats"), {"project_id": project_id})
        self.assertEqual(response.data["done_tasks"], 1)
        self.assertEqual(response.data["total_tasks"], 1)
        self.assertEqual(response.data["overdue_tasks"], 0)
