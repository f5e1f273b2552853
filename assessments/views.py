from rest_framework import viewsets, mixins, permissions, status
from rest_framework.response import Response
from rest_framework.decorators import action
from django_filters.rest_framework import DjangoFilterBackend

from grading.repository import OrmGradeRepository
from grading.services import rank_by_subject
from grading.exceptions import NotFound
from grading.sessions import SESSION_INDEX, normalize_session, sessions_for_term
from grading.snapshot import normalize_key
from .models import GradeEntry, Mark
from .serializers import GradeEntrySerializer, BulkGradesUpsertSerializer


def _required(request, *names):
    values = [request.query_params.get(n) for n in names]
    if not all(values):
        return None, Response({"detail": f"{', '.join(names)} are required"}, status=status.HTTP_400_BAD_REQUEST)
    return values, None


class GradeEntryViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin,
                        mixins.DestroyModelMixin, viewsets.GenericViewSet):
    queryset = GradeEntry.objects.select_related("classroom", "subject").prefetch_related("marks__student")
    serializer_class = GradeEntrySerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["classroom__name", "subject__code", "session"]

    @action(detail=False, methods=["get"], url_path="lookup")
    def lookup(self, request):
        """Saisie d'une séance : {} si rien n'a encore été saisi."""
        values, error = _required(request, "classroom", "subject", "session")
        if error:
            return error
        class_name, code, session = values
        entry = self.get_queryset().filter(
            classroom__name=normalize_key(class_name),
            subject__code=normalize_key(code),
            session=normalize_session(session),
        ).first()
        return Response(GradeEntrySerializer(entry).data if entry else {})

    @action(detail=False, methods=["post"], url_path="bulk")
    def bulk(self, request):
        ser = BulkGradesUpsertSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = ser.save()
        return Response(result, status=status.HTTP_201_CREATED if result["created"] else status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="student-history")
    def student_history(self, request):
        """Toutes les notes d'un élève dans une matière, par séance."""
        values, error = _required(request, "classroom", "subject", "matricule")
        if error:
            return error
        class_name, code, matricule = values
        marks = (Mark.objects
                 .select_related("entry")
                 .filter(entry__classroom__name=normalize_key(class_name),
                         entry__subject__code=normalize_key(code),
                         student__matricule=matricule))
        data = [
            {
                "session": m.entry.session,
                "mark": float(m.value) if m.value is not None else None,
                "absent": m.absent,
                "observation": m.observation,
                "coefficient": m.entry.coefficient,
                "date": m.entry.date,
                "teacher": m.entry.teacher,
            }
            for m in marks
        ]
        data.sort(key=lambda row: SESSION_INDEX[row["session"]])
        return Response(data)

    @action(detail=False, methods=["get"], url_path="ranking")
    def ranking(self, request):
        """Classement d'une matière (toutes les séances par défaut)."""
        values, error = _required(request, "classroom", "subject")
        if error:
            return error
        class_name, code = values
        window = sessions_for_term(request.query_params.get("term"))

        repo = OrmGradeRepository()
        roster = repo.fetch_roster(class_name)
        subject = next((s for s in repo.fetch_subjects() if s.code == normalize_key(code)), None)
        if subject is None:
            raise NotFound(f"Subject {code!r} not found")
        entries = repo.fetch_entries(class_name, subject_codes=[code], sessions=window)

        ranked = rank_by_subject(roster, entries, subject, window)
        return Response([r.as_dict() for r in ranked])

    @action(detail=False, methods=["get"], url_path="by-term")
    def by_term(self, request):
        """Saisies d'une classe dans la fenêtre de séances d'un trimestre."""
        values, error = _required(request, "classroom", "term")
        if error:
            return error
        class_name, term = values
        window = sessions_for_term(term)
        OrmGradeRepository().get_classroom(class_name)
        qs = self.get_queryset().filter(classroom__name=normalize_key(class_name), session__in=window)
        return Response(GradeEntrySerializer(qs, many=True).data)
