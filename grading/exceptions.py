class GradingError(Exception):
    """Erreur de base du moteur de notes."""


class NotFound(GradingError):
    """Élève, matière ou classe absent(e) du snapshot fourni."""


class InvalidInput(GradingError):
    """Trimestre, séance ou note invalide."""
