from django.contrib import admin
from .models import Classroom, SchoolSettings
from enrollments.models import Student


class StudentInline(admin.TabularInline):
    model = Student
    extra = 1
    fields = ("matricule", "name", "sex", "birth_date", "birth_place")


@admin.register(Classroom)
class ClassroomAdmin(admin.ModelAdmin):
    list_display = ("name", "level", "created_at")
    search_fields = ("name",)
    inlines = [StudentInline]


@admin.register(SchoolSettings)
class SchoolSettingsAdmin(admin.ModelAdmin):
    list_display = ("name", "academic_year", "show_rank", "show_statistics", "updated_at")

    def has_add_permission(self, request):
        return not SchoolSettings.objects.exists()
