# contrat/services/genre.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class GenreStrategy(ABC):
    """
    Accord grammatical des fragments qui désignent la personne salariée.

    Chaque stratégie choisit parmi un triplet (masculin, féminin, neutre)
    et expose les jetons utilisés dans les textes de clauses :
      {{Le_salarie}} {{le_salarie}} {{du_salarie}} {{au_salarie}}
      {{LE_SALARIE}} {{e}} (accord) {{il}} (pronom)
    """
    code = ""

    @abstractmethod
    def flex(self, masc: str, fem: str, neutre: Optional[str] = None) -> str:
        ...

    def accord(self) -> str:
        return self.flex("", "e", "·e")

    def pronom(self) -> str:
        return self.flex("il", "elle", "iel")

    def tokens(self) -> Dict[str, str]:
        return {
            "Le_salarie": self.flex("Le Salarié", "La Salariée", "L'Employé·e"),
            "le_salarie": self.flex("le Salarié", "la Salariée", "l'employé·e"),
            "du_salarie": self.flex("du Salarié", "de la Salariée", "de l'employé·e"),
            "au_salarie": self.flex("au Salarié", "à la Salariée", "à l'employé·e"),
            "LE_SALARIE": self.flex("LE SALARIÉ", "LA SALARIÉE", "L'EMPLOYÉ·E"),
            "e": self.accord(),
            "il": self.pronom(),
        }


class Masculin(GenreStrategy):
    code = "M"

    def flex(self, masc: str, fem: str, neutre: Optional[str] = None) -> str:
        return masc


class Feminin(GenreStrategy):
    code = "F"

    def flex(self, masc: str, fem: str, neutre: Optional[str] = None) -> str:
        return fem


class Neutre(GenreStrategy):
    code = "U"

    def flex(self, masc: str, fem: str, neutre: Optional[str] = None) -> str:
        # Terme universel par défaut si le triplet n'en fournit pas
        return neutre if neutre is not None else "L'employé·e"


_ALIASES = {
    "m": "M", "masculin": "M", "masculine": "M", "homme": "M",
    "f": "F", "feminin": "F", "féminin": "F", "feminine": "F", "femme": "F",
    "u": "U", "n": "U", "neutre": "U", "neutral": "U", "universel": "U",
}

_STRATEGIES = {"M": Masculin(), "F": Feminin(), "U": Neutre()}


def resolve_genre(value: Any) -> GenreStrategy:
    """Stratégie pour le genre configuré ; masculin pour toute valeur absente ou inconnue."""
    code = _ALIASES.get(str(value or "").strip().lower(), "M")
    return _STRATEGIES[code]
