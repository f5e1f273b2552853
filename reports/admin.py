from django.contrib import admin
from .models import ReportToken


@admin.register(ReportToken)
class ReportTokenAdmin(admin.ModelAdmin):
    list_display = ("uid", "student", "class_name", "term", "created_at", "valid")
    list_filter = ("valid", "class_name", "term")
    search_fields = ("student__matricule", "student__name")
    readonly_fields = ("payload", "pdf_sha1")
