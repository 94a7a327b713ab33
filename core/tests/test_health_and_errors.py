from io import StringIO

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from core.exceptions import AlreadyMember, custom_exception_handler
from projects.models import Project, ProjectMembership, Role
from tasks.models import Tag, Task

User = get_user_model()


class HealthCheckTestCase(TestCase):
    def test_health_is_public(self):
        response = APIClient().get(reverse("health-check"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "ok")
        self.assertTrue(response.data["db"])
        self.assertIn("env", response.data)


class ErrorEnvelopeTestCase(TestCase):
    def test_drf_errors_are_wrapped(self):
        response = APIClient().get(reverse("projects-list-create"))

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data["success"], False)
        self.assertEqual(response.data["status_code"], 401)
        self.assertEqual(response.data["code"], "not_authenticated")
        self.assertIn("detail", response.data["errors"])
        self.assertTrue(response.has_header("WWW-Authenticate"))

    def test_missing_tag_reports_not_found(self):
        client = APIClient()
        client.force_authenticate(user=User.objects.create_user(
            username="tagger", email="tagger@example.com", password="pass1234",
        ))

        response = client.get(reverse("tag-detail", kwargs={"pk": 999}))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "not_found")

    def test_django_permission_denied_has_its_own_code(self):
        response = custom_exception_handler(PermissionDenied(), {})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["code"], "permission_denied")

    def test_api_root_name_is_unambiguous(self):
        self.assertEqual(reverse("api-root"), "/api/")
        self.assertEqual(reverse("user-me"), "/api/users/me/")

    def test_domain_error_keeps_its_code(self):
        response = custom_exception_handler(AlreadyMember(), {})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "already_member")

    def test_unhandled_errors_become_500(self):
        with self.assertLogs("teamboard.core", level="ERROR"):
            response = custom_exception_handler(RuntimeError("boom"), {})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["code"], "server_error")
        self.assertNotIn("boom", str(response.data))


class SeedDataCommandTestCase(TestCase):
    def test_seed_is_idempotent(self):
        out = StringIO()
        call_command("seed_data", stdout=out)
        call_command("seed_data", stdout=out)

        self.assertIn("Seeded 3 new tasks", out.getvalue())
        self.assertIn("Seeded 0 new tasks", out.getvalue())

        project = Project.objects.get(name="Roadmap")
        self.assertEqual(project.memberships.count(), 3)
        self.assertEqual(project.memberships.filter(role=Role.OWNER).get().user.email, "alice@example.com")
        self.assertEqual(Task.objects.filter(project=project).count(), 3)
        self.assertEqual(Tag.objects.count(), 3)

        # every seeded assignee is a member of the project
        member_ids = set(ProjectMembership.objects.filter(project=project).values_list("user_id", flat=True))
        assignees = set(Task.objects.values_list("assigned_to_id", flat=True))
        self.assertTrue(assignees <= member_ids)

    def test_seeded_users_can_log_in(self):
        call_command("seed_data", "--password", "demo-pass", stdout=StringIO())

        user = User.objects.get(email="bob@example.com")
        self.assertTrue(user.check_password("demo-pass"))
