import io, base64, hashlib, logging

from django.template.loader import render_to_string
from django.utils import timezone
from xhtml2pdf import pisa
import qrcode

from core.models import SchoolSettings
from grading.scales import D0, D5, letter_grade, q2
from grading.services import (
    compute_class_statistics, compute_class_term_results, compute_subject_average,
    mean_of, rank_by_subject, statistics_for_class, to_float,
)
from grading.sessions import ordered, sessions_for_pvr, sessions_for_term, ALL_TERMS, SESSION_CODES
from grading.snapshot import ClassSnapshot, parse_mark

logger = logging.getLogger(__name__)

TIMES_STACK = '"Times New Roman", Times, serif'
GROUPS = (1, 2, 3)


def school_header() -> dict:
    s = SchoolSettings.load()
    return {
        "name": s.name,
        "address": s.address,
        "phone": s.phone,
        "academic_year": s.academic_year,
        "auto_print": s.auto_print,
        "show_rank": s.show_rank,
        "show_statistics": s.show_statistics,
    }


def _session_cell(entry, matricule, level) -> dict:
    """Cellule d'une séance : note /20, %, lettre, absent."""
    line = entry.mark_for(matricule) if entry else None
    if line is None:
        return {"mark": None, "mark100": None, "letter_grade": "", "absent": False, "observation": ""}
    mark = None if line.absent else parse_mark(line.mark)
    return {
        "mark": to_float(mark),
        "mark100": to_float(mark * D5) if mark is not None else None,
        "letter_grade": letter_grade(mark * D5, level) if mark is not None else "",
        "absent": line.absent,
        "observation": line.observation,
    }


def _entries_by_session(snapshot: ClassSnapshot, subject_code, sessions) -> dict:
    return {e.key[2]: e for e in snapshot.entries_for(subject_code, sessions)}


# -------------------------
#  Bulletin
# -------------------------

def build_report_card(snapshot: ClassSnapshot, matricule, term, results=None) -> dict:
    """
    Bulletin d'un élève : matières regroupées par groupe, colonnes de séances,
    totaux, rang et extrêmes de la classe.
    results: résultats de classe déjà calculés (lot de bulletins).
    """
    student = snapshot.student(matricule)
    if results is None:
        results = compute_class_term_results(snapshot, term)
    result = next(r for r in results if r.student.matricule == student.matricule)
    sessions = ordered(sessions_for_term(term))
    level = snapshot.level

    groups = []
    for g in GROUPS:
        lines = []
        for sa in result.subjects:
            if sa.subject.group != g:
                continue
            by_session = _entries_by_session(snapshot, sa.subject.code, sessions)
            line = sa.as_dict()
            line["sessions"] = [_session_cell(by_session.get(s), student.matricule, level) for s in sessions]
            lines.append(line)
        coef = sum(sa.coefficient for sa in result.subjects if sa.subject.group == g)
        weighted = sum((sa.weighted for sa in result.subjects if sa.subject.group == g), D0)
        groups.append({
            "group": g,
            "lines": lines,
            "total_coefficient": coef,
            "weighted_total": to_float(weighted),
            "average": to_float(weighted / coef) if coef else 0.0,
        })

    averages = [r.average20 for r in results]
    payload = result.as_dict()
    payload.pop("subject_averages")
    payload.update({
        "school": school_header(),
        "student": {
            "matricule": student.matricule,
            "name": student.name,
            "sex": student.sex,
            "birth_date": student.birth_date.isoformat() if student.birth_date else "",
            "birth_place": student.birth_place,
        },
        "classroom": {"name": snapshot.class_name, "level": level, "roll": len(snapshot.roster)},
        "sessions": [s.upper() for s in sessions],
        "groups": groups,
        "class_stats": {
            "best": to_float(max(averages)) if averages else 0.0,
            "last": to_float(min(averages)) if averages else 0.0,
            "class_avg": to_float(mean_of(averages)),
        },
    })
    return payload


# -------------------------
#  Relevé de notes (une matière)
# -------------------------

def build_grade_report(snapshot: ClassSnapshot, subject_code, term, include_all_sessions=False) -> dict:
    subject = snapshot.subject(subject_code)
    level = snapshot.level
    sessions = ordered(SESSION_CODES if include_all_sessions else sessions_for_term(term))
    by_session = _entries_by_session(snapshot, subject.code, sessions)

    rows = []
    for student in snapshot.roster:
        res = compute_subject_average(snapshot.entries, subject, student, sessions)
        rows.append({
            "matricule": student.matricule,
            "name": student.name,
            "sex": student.sex,
            "sessions": [
                dict(_session_cell(by_session.get(s), student.matricule, level), session=s) for s in sessions
            ],
            "average20": to_float(res.average20) if res else None,
            "average100": to_float(res.average100) if res else None,
            "letter_grade": res.letter_grade if res else letter_grade(None, level),
            "appreciation": res.appreciation if res else "",
            "count": res.count if res else 0,
            # sans note : 0, comme dans le classement
            "_average": res.average20 if res else D0,
        })

    # avec toutes les séances, la moyenne cumulée est la moyenne de la fenêtre complète
    if include_all_sessions:
        for row in rows:
            row["cumulative_average"] = row["average20"]

    ranked = rank_by_subject(snapshot.roster, snapshot.entries, subject, sessions)
    rank_map = {r.student.matricule: r.rank for r in ranked}
    for row in rows:
        row["rank"] = rank_map[row["matricule"]]

    stats = compute_class_statistics([(r["sex"], r.pop("_average")) for r in rows], level)
    teachers = [e.teacher for e in by_session.values() if e.teacher]

    return {
        "class_name": snapshot.class_name,
        "subject": {"code": subject.code, "name": subject.name, "coefficient": subject.coefficient},
        "term": term,
        "include_all_sessions": include_all_sessions,
        "level": level,
        "date": timezone.localdate().isoformat(),
        "teacher": teachers[-1] if teachers else "",
        "sessions": [s.upper() for s in sessions],
        "student_grades": rows,
        "rank_map": rank_map,
        "statistics": stats.as_dict(),
        "school": school_header(),
    }


# -------------------------
#  PVR (procès-verbal)
# -------------------------

def build_pvr(snapshot: ClassSnapshot, term, session_type=None) -> dict:
    """
    Matrice élèves x matières sur les séances du PVR. La moyenne générale
    est la moyenne simple des moyennes matières arrondies à 2 décimales
    (sans coefficient). Les élèves sans aucune note restent à None.
    """
    sessions = ordered(sessions_for_pvr(term, session_type))
    level = snapshot.level
    subjects = snapshot.subjects
    entries = {s.code: _entries_by_session(snapshot, s.code, sessions) for s in subjects}

    students = []
    for no, student in enumerate(snapshot.roster, start=1):
        cells = []
        defined = []
        for subject in subjects:
            res = compute_subject_average(snapshot.entries, subject, student, sessions)
            if res is not None:
                defined.append(q2(res.average20))
            cells.append({
                "code": subject.code,
                "sessions": [_session_cell(entries[subject.code].get(s), student.matricule, level) for s in sessions],
                "average20": to_float(res.average20) if res else None,
                "letter_grade": res.letter_grade if res else None,
            })
        overall = mean_of(defined) if defined else None
        students.append({
            "no": no,
            "matricule": student.matricule,
            "name": student.name,
            "sex": student.sex,
            "subjects": cells,
            "overall_average20": to_float(overall),
            "overall_average100": to_float(overall * D5) if overall is not None else None,
            "overall_letter_grade": letter_grade(overall * D5, level) if overall is not None else None,
            "_overall": overall,
        })

    # sans moyenne -> dernier rang
    with_avg = sorted((s for s in students if s["_overall"] is not None), key=lambda s: s["_overall"], reverse=True)
    rank_map = {s["matricule"]: i for i, s in enumerate(with_avg, start=1)}
    for s in students:
        s["rank"] = rank_map.get(s["matricule"], len(students))

    stats = compute_class_statistics([(s["sex"], s.pop("_overall")) for s in students], level)

    return {
        "class_name": snapshot.class_name,
        "term": term,
        "session_type": (session_type or ALL_TERMS).lower(),
        "level": level,
        "date": timezone.localdate().isoformat(),
        "sessions": [s.upper() for s in sessions],
        "subjects": [
            {"code": s.code, "name": s.name, "group": s.group, "coefficient": s.coefficient}
            for s in subjects
        ],
        "students": students,
        "statistics": stats.as_dict(),
        "school": school_header(),
    }


def class_statistics_payload(snapshot: ClassSnapshot, term=None, subject_code=None) -> dict:
    stats = statistics_for_class(snapshot, term=term, subject_code=subject_code)
    return dict(stats.as_dict(), class_name=snapshot.class_name, term=term, subject=subject_code)


# -------------------------
#  PDF / QR
# -------------------------

def make_qr_png_b64(text: str) -> str:
    img = qrcode.make(text)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def render_pdf_from_html(html: str) -> bytes:
    out = io.BytesIO()
    status = pisa.CreatePDF(io.StringIO(html), dest=out)
    if status.err:
        logger.warning("xhtml2pdf reported %d error(s) while rendering", status.err)
    return out.getvalue()


def build_report_card_html(payload: dict, verify_url: str = None) -> str:
    return render_to_string("reports/report_card.html", {
        "p": payload,
        "verify_url": verify_url,
        "qr_b64": make_qr_png_b64(verify_url) if verify_url else None,
        "TIMES_STACK": TIMES_STACK,
    })


def sha1_bytes(b: bytes) -> str:
    return hashlib.sha1(b).hexdigest()
