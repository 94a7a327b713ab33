from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User

@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('email', 'name', 'username', 'title', 'department', 'is_staff')
    list_filter = ('is_staff', 'is_superuser', 'is_active', 'department')
    search_fields = ('email', 'name', 'username')
    fieldsets = UserAdmin.fieldsets + (
        ('Profile', {'fields': ('name', 'image', 'bio', 'title', 'department')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Profile', {'fields': ('email', 'name')}),
    )
