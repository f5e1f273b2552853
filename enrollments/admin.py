from django.contrib import admin
from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("matricule", "name", "sex", "classroom", "birth_date")
    list_filter = ("classroom", "sex")
    search_fields = ("matricule", "name", "classroom__name")
