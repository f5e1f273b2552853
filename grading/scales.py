"""
Barèmes : niveau de la classe, lettres OL/AL, appréciations, décision du
conseil et distinctions.

Les seuils sur /20 (16, 14, 12, 10, 8) sont partagés par les appréciations,
les tranches de distribution et les distinctions.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .exceptions import InvalidInput

D0 = Decimal("0")
D5 = Decimal("5")
D20 = Decimal("20")

OL, AL, JS = "OL", "AL", "JS"

EXCELLENT_MARK = Decimal("16")
VERY_GOOD_MARK = Decimal("14")
GOOD_MARK = Decimal("12")
PASS_MARK = Decimal("10")
WARNING_MARK = Decimal("8")

# (borne haute exclue, lettre) sur le pourcentage ; au-delà de la dernière borne -> "A"
OL_BANDS = (
    (Decimal("30"), "U"),
    (Decimal("40"), "E"),
    (Decimal("45"), "D"),
    (Decimal("55"), "C"),
    (Decimal("70"), "B"),
)
AL_BANDS = (
    (Decimal("30"), "F"),
    (Decimal("40"), "O"),
    (Decimal("50"), "E"),
    (Decimal("55"), "D"),
    (Decimal("60"), "C"),
    (Decimal("70"), "B"),
)
LEVEL_BANDS = {OL: OL_BANDS, AL: AL_BANDS}

OL_LETTERS = ("A", "B", "C", "D", "E", "U", "NC")
AL_LETTERS = ("A", "B", "C", "D", "E", "O", "F", "NC")

# (seuil inclus, clé de tranche, appréciation)
PERFORMANCE_BANDS = (
    (EXCELLENT_MARK, "excellent", "Excellent"),
    (VERY_GOOD_MARK, "very_good", "Très Bien"),
    (GOOD_MARK, "good", "Bien"),
    (PASS_MARK, "passable", "Passable"),
)
INSUFFICIENT = ("insufficient", "Insuffisant")
BAND_KEYS = tuple(b[1] for b in PERFORMANCE_BANDS) + (INSUFFICIENT[0],)

PASSABLE = "PASSABLE"
ACADEMIC_WARNING = "ACADEMIC WARNING"
SERIOUS_ACADEMIC_WARNING = "SERIOUS ACADEMIC WARNING"


def to_decimal(value) -> Decimal:
    if isinstance(value, bool):
        raise InvalidInput(f"Not a number: {value!r}")
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInput(f"Not a number: {value!r}")
    if not d.is_finite():
        raise InvalidInput(f"Not a finite number: {value!r}")
    return d


def q2(x) -> Decimal:
    """Arrondi à 2 décimales (affichage uniquement)."""
    return Decimal(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def level_for_class(class_name) -> str:
    name = (class_name or "").upper()
    if "FORM 4" in name or "FORM 5" in name:
        return OL
    if "L6" in name or "U6" in name:
        return AL
    return JS


def letters_for_level(level) -> tuple:
    return {OL: OL_LETTERS, AL: AL_LETTERS}.get(level, ())


def letter_grade(percentage, level) -> str:
    """Lettre OL/AL pour un pourcentage (= moyenne/20 x 5). JS -> ''."""
    bands = LEVEL_BANDS.get(level)
    if bands is None:
        return ""
    if percentage is None:
        return "NC"
    p = to_decimal(percentage)
    if p == D0:
        return "NC"
    for upper, letter in bands:
        if p < upper:
            return letter
    return "A"


def performance_band(average20) -> str:
    avg = to_decimal(average20)
    for threshold, key, _label in PERFORMANCE_BANDS:
        if avg >= threshold:
            return key
    return INSUFFICIENT[0]


def appreciation(average20) -> str:
    avg = to_decimal(average20)
    for threshold, _key, label in PERFORMANCE_BANDS:
        if avg >= threshold:
            return label
    return INSUFFICIENT[1]


def council_decision(average20) -> str:
    avg = to_decimal(average20)
    if avg >= PASS_MARK:
        return PASSABLE
    if avg >= WARNING_MARK:
        return ACADEMIC_WARNING
    return SERIOUS_ACADEMIC_WARNING


def honors(average20) -> dict:
    # tranches non exclusives
    avg = to_decimal(average20)
    return {
        "honor_roll": avg >= EXCELLENT_MARK,
        "encouragements": avg >= VERY_GOOD_MARK,
        "distinctions": avg >= GOOD_MARK,
        "academic_warning": avg < PASS_MARK,
        "serious_academic_warning": avg < WARNING_MARK,
    }


def is_pass(average20) -> bool:
    return to_decimal(average20) >= PASS_MARK
