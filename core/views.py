from django.conf import settings
from django.utils import timezone
from rest_framework import viewsets, mixins, permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from .models import Classroom, SchoolSettings
from .serializers import ClassroomSerializer, SchoolSettingsSerializer


class ClassroomViewSet(mixins.ListModelMixin, mixins.CreateModelMixin,
                       mixins.RetrieveModelMixin, mixins.DestroyModelMixin,
                       viewsets.GenericViewSet):
    queryset = Classroom.objects.all()
    serializer_class = ClassroomSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["name"]


class SchoolSettingsView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response(SchoolSettingsSerializer(SchoolSettings.load()).data)

    def put(self, request):
        ser = SchoolSettingsSerializer(SchoolSettings.load(), data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(ser.data, status=status.HTTP_200_OK)


class SystemInfoView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        from enrollments.models import Student
        from subjects.models import Subject
        from assessments.models import GradeEntry

        return Response({
            "version": getattr(settings, "APP_VERSION", ""),
            "data_size": {
                "classes": Classroom.objects.count(),
                "students": Student.objects.count(),
                "subjects": Subject.objects.count(),
                "grade_entries": GradeEntry.objects.count(),
            },
            "server_time": timezone.now().isoformat(),
        })
