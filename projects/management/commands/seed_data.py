from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from projects.models import Project, ProjectMembership, Role
from tasks.models import Tag, Task, TaskComment, TaskPriority, TaskStatus

User = get_user_model()

DEMO_PASSWORD = "password"


class Command(BaseCommand):
    help = "Seeds the database with demo users, a project, tags and tasks"

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            default=DEMO_PASSWORD,
            help="Password given to every demo user",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding data...")

        # 1. Users
        users = {}
        for username, name, title in [
            ("alice", "Alice Owner", "Engineering Manager"),
            ("bob", "Bob Admin", "Tech Lead"),
            ("carol", "Carol Member", "Developer"),
        ]:
            user, created = User.objects.get_or_create(
                email=f"{username}@example.com",
                defaults={"username": username, "name": name, "title": title},
            )
            if created:
                user.set_password(options["password"])
                user.save()
            users[username] = user
        alice, bob, carol = users["alice"], users["bob"], users["carol"]

        # 2. Project; the OWNER membership is created with it
        project = Project.objects.filter(name="Roadmap", created_by=alice).first()
        if project is None:
            project = Project.objects.create(
                name="Roadmap",
                description="Product roadmap for the next quarter.",
                color="#8b5cf6",
                created_by=alice,
            )
        self.stdout.write(f"Used project: {project.name}")

        for user, role in [(alice, Role.OWNER), (bob, Role.ADMIN), (carol, Role.MEMBER)]:
            ProjectMembership.objects.get_or_create(project=project, user=user, defaults={"role": role})

        # 3. Tags
        tags = {}
        for name, color in [("backend", "#2563eb"), ("frontend", "#16a34a"), ("bug", "#dc2626")]:
            tags[name], _ = Tag.objects.get_or_create(name=name, defaults={"color": color})

        # 4. Tasks
        now = timezone.now()
        tasks_data = [
            {
                "title": "Write spec",
                "status": TaskStatus.DONE,
                "priority": TaskPriority.HIGH,
                "created_by": bob,
                "assigned_to": alice,
                "tags": ["backend"],
            },
            {
                "title": "Build login page",
                "status": TaskStatus.IN_PROGRESS,
                "priority": TaskPriority.MEDIUM,
                "created_by": alice,
                "assigned_to": carol,
                "due_date": now + timedelta(days=3),
                "tags": ["frontend"],
            },
            {
                "title": "Fix flaky export",
                "status": TaskStatus.TODO,
                "priority": TaskPriority.URGENT,
                "created_by": carol,
                "assigned_to": bob,
                "due_date": now - timedelta(days=1),
                "tags": ["backend", "bug"],
            },
        ]

        created_count = 0
        for data in tasks_data:
            tag_names = data.pop("tags")
            task, created = Task.objects.get_or_create(
                project=project,
                title=data.pop("title"),
                defaults=data,
            )
            if created:
                created_count += 1
                task.tags.set([tags[name] for name in tag_names])
                TaskComment.objects.create(task=task, author=task.created_by, content="Kicking this off.")

        self.stdout.write(self.style.SUCCESS(f"Seeded {created_count} new tasks in '{project.name}'"))
