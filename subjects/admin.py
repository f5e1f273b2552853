from django.contrib import admin
from .models import Subject


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "group", "coefficient", "is_active")
    list_filter = ("group", "is_active")
    search_fields = ("code", "name")
