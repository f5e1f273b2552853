from django.conf import settings
from django.db import models

from grading.scales import level_for_class
from grading.snapshot import normalize_key


class Classroom(models.Model):
    """
    Exemple de nom: 'FORM 4 SCE', 'L6 ART'.
    Le niveau (OL/AL/JS) est déduit du nom.
    """
    name = models.CharField(max_length=32, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def save(self, *args, **kwargs):
        self.name = normalize_key(self.name)
        super().save(*args, **kwargs)

    @property
    def level(self):
        return level_for_class(self.name)

    def __str__(self):
        return self.name


class SchoolSettings(models.Model):
    """Paramètres de l'établissement (une seule ligne, pk=1)."""
    name = models.CharField(max_length=128)
    address = models.CharField(max_length=128, blank=True)
    phone = models.CharField(max_length=64, blank=True)
    academic_year = models.CharField(max_length=9)  # '2024-2025'
    auto_print = models.BooleanField(default=False)
    show_rank = models.BooleanField(default=True)
    show_statistics = models.BooleanField(default=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "school settings"
        verbose_name_plural = "school settings"

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(pk=1, defaults={
            "name": getattr(settings, "SCHOOL_NAME", ""),
            "address": getattr(settings, "SCHOOL_ADDRESS", ""),
            "phone": getattr(settings, "SCHOOL_PHONE", ""),
            "academic_year": getattr(settings, "ACADEMIC_YEAR", ""),
        })
        return obj

    def __str__(self):
        return f"{self.name} ({self.academic_year})"
