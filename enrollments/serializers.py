from rest_framework import serializers
from core.models import Classroom
from .models import Student


class StudentSerializer(serializers.ModelSerializer):
    # la classe est désignée par son nom ('FORM 4 SCE')
    classroom = serializers.SlugRelatedField(slug_field="name", queryset=Classroom.objects.all())
    level = serializers.CharField(source="classroom.level", read_only=True)

    class Meta:
        model = Student
        fields = ["id", "matricule", "name", "sex", "classroom", "level",
                  "birth_date", "birth_place", "parent", "phone"]

    def to_internal_value(self, data):
        if hasattr(data, "get") and isinstance(data.get("classroom"), str):
            data = data.copy()
            data["classroom"] = data["classroom"].strip().upper()
        return super().to_internal_value(data)

    def validate_matricule(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Matricule is required.")
        return value
