"""
Séances (CC = contrôle continu, DS = devoir surveillé) et fenêtres de séances.

Les trimestres sont cumulatifs : le trimestre 2 reprend les séances du
trimestre 1, le trimestre 3 couvre toute l'année.
"""
import logging

from .exceptions import InvalidInput

logger = logging.getLogger(__name__)

SESSION_CODES = ("cc1", "ds1", "cc2", "ds2", "cc3", "ds3", "cc4", "ds4", "cc5", "ds5")
SESSION_INDEX = {code: i for i, code in enumerate(SESSION_CODES)}

ALL_TERMS = "all"

TERM_SESSIONS = {
    1: SESSION_CODES[:4],
    2: SESSION_CODES[:8],
    3: SESSION_CODES,
    ALL_TERMS: SESSION_CODES,
}

# PVR par type de séance (non cumulatif)
SESSION_TYPE_SESSIONS = {
    ("cc", 1): ("cc1", "cc2"),
    ("cc", 2): ("cc3", "cc4"),
    ("cc", 3): ("cc5",),
    ("ds", 1): ("ds1", "ds2"),
    ("ds", 2): ("ds3", "ds4"),
    ("ds", 3): ("ds5",),
}

VALID_WINDOWS = frozenset(
    frozenset(w) for w in list(TERM_SESSIONS.values()) + list(SESSION_TYPE_SESSIONS.values())
)


def normalize_session(code) -> str:
    session = str(code or "").strip().lower()
    if session not in SESSION_INDEX:
        raise InvalidInput(f"Unknown session code: {code!r}")
    return session


def parse_term(term):
    """
    1, 2, 3 (int ou str) -> int ; None / "all" -> "all".
    Un entier inconnu (ex: 4) retombe sur la fenêtre complète ;
    une valeur non entière lève InvalidInput.
    """
    if term is None:
        return ALL_TERMS
    if isinstance(term, bool):
        raise InvalidInput(f"Invalid term: {term!r}")
    if isinstance(term, str):
        raw = term.strip().lower()
        if raw == ALL_TERMS:
            return ALL_TERMS
        try:
            term = int(raw)
        except ValueError:
            raise InvalidInput(f"Invalid term: {term!r}")
    if not isinstance(term, int):
        raise InvalidInput(f"Invalid term: {term!r}")
    if term in TERM_SESSIONS:
        return term
    logger.warning("Unknown term %s, falling back to the full session window", term)
    return ALL_TERMS


def sessions_for_term(term) -> tuple:
    return TERM_SESSIONS[parse_term(term)]


def sessions_for_pvr(term, session_type=None) -> tuple:
    """Séances d'un PVR : 'cc' / 'ds' -> séances du trimestre seul, sinon cumul."""
    kind = (session_type or "").strip().lower()
    if kind in ("cc", "ds"):
        t = parse_term(term)
        # 'all' n'a pas de sens pour un type de séance : on prend le trimestre 3
        return SESSION_TYPE_SESSIONS[(kind, 3 if t == ALL_TERMS else t)]
    if kind not in ("", ALL_TERMS):
        raise InvalidInput(f"Unknown session type: {session_type!r}")
    return sessions_for_term(term)


def check_window(window) -> frozenset:
    """Valide une fenêtre de séances (doit être l'une des fenêtres fixes)."""
    try:
        sessions = frozenset(normalize_session(s) for s in window)
    except TypeError:
        raise InvalidInput(f"Invalid session window: {window!r}")
    if sessions not in VALID_WINDOWS:
        raise InvalidInput(f"Invalid session window: {sorted(sessions, key=SESSION_INDEX.get)}")
    return sessions


def ordered(sessions) -> list:
    return sorted(sessions, key=SESSION_INDEX.get)
