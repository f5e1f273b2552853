from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator

from grading.snapshot import normalize_key


class Subject(models.Model):
    """
    Matière du catalogue. Le coefficient pondère la moyenne trimestrielle ;
    le groupe (1..3) ne sert qu'au regroupement sur le bulletin.
    """
    class Group(models.IntegerChoices):
        GROUP_1 = 1, "Groupe 1"
        GROUP_2 = 2, "Groupe 2"
        GROUP_3 = 3, "Groupe 3"

    code = models.CharField(max_length=16, unique=True)   # 'MATH', 'ENG'
    name = models.CharField(max_length=64)
    group = models.PositiveSmallIntegerField(choices=Group.choices, default=Group.GROUP_1,
                                             validators=[MinValueValidator(1), MaxValueValidator(3)])
    coefficient = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["id"]

    def save(self, *args, **kwargs):
        self.code = normalize_key(self.code)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} [{self.code}]"
