from decimal import Decimal
from collections import defaultdict
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.db.models import Count, Max, Q

from core.models import Classroom
from assessments.models import Mark
from grading.repository import OrmGradeRepository
from grading.scales import AL, D5, OL, BAND_KEYS, letter_grade, letters_for_level, level_for_class, performance_band
from grading.services import mean_of, to_float
from grading.sessions import parse_term, sessions_for_term
from reports.services import class_statistics_payload

# Create your views here.

@api_view(["GET"])
@permission_classes([AllowAny])
def class_stats(request, class_name: str):
    """Statistiques d'une classe : ?term=1|2|3|all, ou ?subject=CODE (toutes séances par défaut)."""
    term = parse_term(request.GET.get("term"))
    subject = request.GET.get("subject") or None

    snapshot = OrmGradeRepository().snapshot(class_name, sessions=sessions_for_term(term))
    return Response(class_statistics_payload(snapshot, term=term, subject_code=subject))


@api_view(["GET"])
@permission_classes([AllowAny])
def school_stats(request):
    """Vue d'ensemble de l'établissement : effectifs et notes individuelles."""
    # Effectifs par classe
    classes = Classroom.objects.annotate(
        total=Count("students"),
        male=Count("students", filter=Q(students__sex="M")),
        female=Count("students", filter=Q(students__sex="F")),
    ).order_by("id")
    enrollment = [
        {"class_name": c.name, "level": c.level, "total": c.total, "male": c.male, "female": c.female}
        for c in classes
    ]

    # Notes individuelles (hors absents et cases vides)
    rows = list(
        Mark.objects.filter(absent=False, value__isnull=False)
        .values_list("value", "entry__classroom__name")
    )
    values = [Decimal(v) for v, _ in rows]

    distribution = {key: 0 for key in BAND_KEYS}
    for v in values:
        distribution[performance_band(v)] += 1

    # Lettres par niveau, sur le pourcentage de chaque note
    letters = {lvl: {letter: 0 for letter in letters_for_level(lvl)} for lvl in (OL, AL)}
    by_level = defaultdict(list)
    for v, class_name in rows:
        by_level[level_for_class(class_name)].append(Decimal(v))
    for lvl in (OL, AL):
        for v in by_level[lvl]:
            letters[lvl][letter_grade(v * D5, lvl)] += 1

    mean = mean_of(values)
    last = Mark.objects.aggregate(last=Max("entry__updated_at"))["last"]

    return Response({
        "enrollment": enrollment,
        "total_students": sum(c["total"] for c in enrollment),
        "marks": {
            "count": len(values),
            "mean": to_float(mean),
            "mean100": to_float(mean * D5),
            "highest": to_float(max(values)) if values else 0.0,
            "lowest": to_float(min(values)) if values else 0.0,
        },
        "distribution": distribution,
        "ol_letter_distribution": letters[OL],
        "al_letter_distribution": letters[AL],
        "last_updated": last.isoformat() if last else None,
    })
