from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from projects.models import ProjectMembership, Role
from projects.services import ProjectService
from tasks.models import Task

User = get_user_model()


class SignupLoginTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.signup_url = reverse("signup")
        self.login_url = reverse("login")

    def _signup(self, **overrides):
        payload = {"name": "Ada Lovelace", "email": "ada@example.com", "password": "secret12"}
        payload.update(overrides)
        return self.client.post(self.signup_url, payload, format="json")

    def test_signup_creates_user_with_hashed_password(self):
        response = self._signup()
        self.assertEqual(response.status_code, 201, response.data)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["user"]["email"], "ada@example.com")

        user = User.objects.get(email="ada@example.com")
        self.assertEqual(user.name, "Ada Lovelace")
        self.assertTrue(user.check_password("secret12"))
        self.assertNotEqual(user.password, "secret12")
        # the profile title is untouched by credentials
        self.assertIsNone(user.title)

    def test_signup_rejects_duplicate_email_case_insensitive(self):
        self._signup()
        response = self._signup(email="ADA@example.com")

        self.assertEqual(response.status_code, 400)
        self.assertIn("email", response.data["errors"])
        self.assertEqual(User.objects.filter(email__iexact="ada@example.com").count(), 1)

    def test_signup_validates_fields(self):
        for overrides in [{"password": "123"}, {"email": "nope"}, {"name": ""}]:
            response = self._signup(**overrides)
            self.assertEqual(response.status_code, 400, overrides)

        self.assertFalse(User.objects.exists())

    def test_signup_derives_unique_usernames(self):
        User.objects.create_user(username="ada", email="other@example.com", password="secret12")

        self._signup()
        self.assertEqual(User.objects.get(email="ada@example.com").username, "ada_2")

    def test_login_returns_tokens_usable_for_me(self):
        self._signup()

        response = self.client.post(
            self.login_url, {"email": "ada@example.com", "password": "secret12"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        me = self.client.get(reverse("auth-me"))
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data["email"], "ada@example.com")

    def test_login_rejects_wrong_password(self):
        self._signup()

        response = self.client.post(
            self.login_url, {"email": "ada@example.com", "password": "wrong-one"}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data["success"])

        unknown = self.client.post(
            self.login_url, {"email": "ghost@example.com", "password": "secret12"}, format="json"
        )
        self.assertEqual(unknown.status_code, 400)


class ProfileAndSearchTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username="ada", email="ada@example.com", password="secret12", name="Ada Lovelace",
        )
        self.client.force_authenticate(user=self.user)
        self.me_url = reverse("user-me")
        self.search_url = reverse("user-search")

    def test_profile_includes_activity_counts(self):
        project = ProjectService.create_project(self.user, name="Engines")
        Task.objects.create(project=project, title="Analytical", created_by=self.user, assigned_to=self.user)

        other = User.objects.create_user(username="charles", email="charles@example.com", password="secret12")
        foreign = ProjectService.create_project(other, name="Difference")
        ProjectMembership.objects.create(project=foreign, user=self.user, role=Role.MEMBER)

        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["created_projects_count"], 1)
        self.assertEqual(response.data["memberships_count"], 2)
        self.assertEqual(response.data["created_tasks_count"], 1)
        self.assertEqual(response.data["assigned_tasks_count"], 1)
        self.assertNotIn("password", response.data)

    def test_update_profile(self):
        response = self.client.patch(
            self.me_url,
            {"title": "Mathematician", "department": "R&D", "bio": "Notes on engines"},
            format="json",
        )
        self.assertEqual(response.status_code, 200, response.data)

        self.user.refresh_from_db()
        self.assertEqual(self.user.title, "Mathematician")
        self.assertEqual(self.user.department, "R&D")
        self.assertEqual(self.user.name, "Ada Lovelace")
        self.assertTrue(self.user.check_password("secret12"))

    def test_email_is_read_only_on_profile(self):
        self.client.patch(self.me_url, {"email": "changed@example.com"}, format="json")
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, "ada@example.com")

    def test_search_by_name_or_email(self):
        User.objects.create_user(username="grace", email="grace@navy.mil", password="x" * 8, name="Grace Hopper")
        User.objects.create_user(username="alan", email="alan@example.com", password="x" * 8, name="Alan Turing")

        response = self.client.get(self.search_url, {"query": "hopper"})
        self.assertEqual([u["email"] for u in response.data], ["grace@navy.mil"])

        response = self.client.get(self.search_url, {"query": "EXAMPLE.COM"})
        self.assertEqual({u["email"] for u in response.data}, {"ada@example.com", "alan@example.com"})

    def test_search_is_capped(self):
        for i in range(12):
            User.objects.create_user(username=f"dev{i}", email=f"dev{i}@corp.io", password="x" * 8)

        response = self.client.get(self.search_url, {"query": "corp.io"})
        self.assertEqual(len(response.data), 10)

    def test_search_requires_query(self):
        response = self.client.get(self.search_url)
        self.assertEqual(response.status_code, 400)
