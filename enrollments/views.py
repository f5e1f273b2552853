from rest_framework import viewsets, permissions, filters
from rest_framework.response import Response
from rest_framework.decorators import action
from django_filters.rest_framework import DjangoFilterBackend

from grading.exceptions import NotFound
from core.models import Classroom
from .models import Student
from .serializers import StudentSerializer


class StudentViewSet(viewsets.ModelViewSet):
    queryset = Student.objects.select_related("classroom").all()
    serializer_class = StudentSerializer
    permission_classes = [permissions.AllowAny]
    lookup_field = "matricule"
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["sex"]
    search_fields = ["matricule", "name"]

    def get_queryset(self):
        qs = super().get_queryset()
        classroom = self.request.query_params.get("classroom")
        if classroom:
            # id ou nom de classe
            if classroom.isdigit():
                qs = qs.filter(classroom_id=int(classroom))
            else:
                qs = qs.filter(classroom__name=classroom.strip().upper())
        return qs

    @action(detail=False, methods=["get"], url_path=r"by-class/(?P<class_name>[^/]+)")
    def by_class(self, request, class_name=None):
        name = class_name.strip().upper()
        if not Classroom.objects.filter(name=name).exists():
            raise NotFound(f"Class {class_name!r} not found")
        qs = self.get_queryset().filter(classroom__name=name).order_by("id")
        return Response(StudentSerializer(qs, many=True).data)
