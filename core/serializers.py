from rest_framework import serializers
from .models import Classroom, SchoolSettings


class ClassroomSerializer(serializers.ModelSerializer):
    level = serializers.CharField(read_only=True)
    student_count = serializers.SerializerMethodField()

    class Meta:
        model = Classroom
        fields = ["id", "name", "level", "student_count", "created_at"]
        read_only_fields = ["created_at"]

    def validate_name(self, value):
        name = (value or "").strip().upper()
        if not name:
            raise serializers.ValidationError("Class name is required.")
        qs = Classroom.objects.filter(name=name)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A class with this name already exists.")
        return name

    def get_student_count(self, obj):
        return obj.students.count()


class SchoolSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = SchoolSettings
        fields = ["name", "address", "phone", "academic_year",
                  "auto_print", "show_rank", "show_statistics", "updated_at"]
        read_only_fields = ["updated_at"]
