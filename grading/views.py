from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .repository import OrmGradeRepository
from .services import compute_class_term_results, compute_term_result, statistics_for_class
from .sessions import sessions_for_term


class StudentTermAverageView(APIView):
    """Moyenne trimestrielle, rang et décision du conseil d'un élève."""
    permission_classes = [AllowAny]

    def get(self, request, class_name, matricule, term):
        window = sessions_for_term(term)
        snapshot = OrmGradeRepository().snapshot(class_name, sessions=window)
        result = compute_term_result(snapshot, matricule, term)
        return Response(result.as_dict())


class ClassTermAveragesView(APIView):
    """Tableau classé de la classe pour un trimestre."""
    permission_classes = [AllowAny]

    def get(self, request, class_name, term):
        window = sessions_for_term(term)
        snapshot = OrmGradeRepository().snapshot(class_name, sessions=window)
        with_details = request.query_params.get("details", "0") == "1"

        results = compute_class_term_results(snapshot, term)
        rows = []
        for r in results:
            row = r.as_dict()
            if not with_details:
                row.pop("subject_averages")
            rows.append(row)

        return Response({
            "class_name": snapshot.class_name,
            "level": snapshot.level,
            "term": results[0].term if results else term,
            "results": rows,
            "statistics": statistics_for_class(snapshot, term=term).as_dict(),
        })
