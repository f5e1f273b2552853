from django.contrib import admin
from .models import GradeEntry, Mark


class MarkInline(admin.TabularInline):
    model = Mark
    extra = 0


@admin.register(GradeEntry)
class GradeEntryAdmin(admin.ModelAdmin):
    list_display = ("classroom", "subject", "session", "coefficient", "teacher", "date")
    list_filter = ("classroom", "subject", "session")
    search_fields = ("classroom__name", "subject__code", "subject__name", "teacher")
    inlines = [MarkInline]


@admin.register(Mark)
class MarkAdmin(admin.ModelAdmin):
    list_display = ("entry", "student", "value", "absent")
    list_filter = ("entry__classroom", "entry__session", "absent")
    search_fields = ("student__matricule", "student__name", "entry__subject__code")
