from rest_framework import viewsets, permissions, filters
from django_filters.rest_framework import DjangoFilterBackend
from .models import Subject
from .serializers import SubjectSerializer


class SubjectViewSet(viewsets.ModelViewSet):
    queryset = Subject.objects.all()
    serializer_class = SubjectSerializer
    permission_classes = [permissions.AllowAny]
    lookup_field = "code"
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["group", "is_active"]
    search_fields = ["code", "name"]

    def get_object(self):
        # codes comparés en majuscules
        self.kwargs[self.lookup_field] = self.kwargs[self.lookup_field].upper()
        return super().get_object()
