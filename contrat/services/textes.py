# contrat/services/textes.py
from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger("contrat.textes")

APP_DIR = Path(__file__).resolve().parents[1]    # .../contrat
RULES_DIR = APP_DIR / "rules"                    # .../contrat/rules
DEFAULT_TEXTES = RULES_DIR / "textes_contrat.yml"


def textes_path() -> Path:
    """Fichier des textes de clauses (surcharge possible via CONTRAT_TEXTES_PATH)."""
    env = (os.getenv("CONTRAT_TEXTES_PATH") or "").strip()
    return Path(env) if env else DEFAULT_TEXTES


def _mtime(p: Path) -> float:
    try:
        return p.stat().st_mtime
    except Exception:
        return 0.0


def _flatten(node: Any, prefix: str = "") -> Dict[str, str]:
    """
    Aplatit l'arbre YAML en clés pointées :
      {"nature": {"cdi": {"intro": "..."}}} -> {"nature.cdi.intro": "..."}
    Les feuilles non textuelles sont converties en str.
    """
    out: Dict[str, str] = {}
    if isinstance(node, dict):
        for k, v in node.items():
            key = f"{prefix}.{k}" if prefix else str(k)
            out.update(_flatten(v, key))
    elif node is not None and prefix:
        out[prefix] = str(node)
    return out


@lru_cache(maxsize=8)
def _load_textes_cached(path_str: str, mtime: float) -> Dict[str, str]:
    p = Path(path_str)
    if not p.exists():
        logger.warning("fichier de textes introuvable: %s", p)
        return {}
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except Exception as e:
        logger.warning("YAML de textes invalide (%s): %s", p, e)
        return {}
    if not isinstance(data, dict):
        return {}
    # Seule la section 'textes' porte des contenus ; 'meta' est informative
    return _flatten(data.get("textes") or {})


def load_textes(path: Optional[Path] = None) -> Dict[str, str]:
    """Chargement YAML avec cache (clé: chemin + mtime)."""
    p = path or textes_path()
    return _load_textes_cached(str(p), _mtime(p))


# -----------------------
# Remplacement des placeholders
# -----------------------

# Placeholders reconnus : {{cle}} (style Jinja)
TOKEN_PATTERN = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")


def fill_placeholders(text: str, params: Optional[Dict[str, Any]]) -> str:
    """
    Remplace les tokens dans text avec valeurs issues de params.
    - Clé absente de params : le placeholder reste tel quel (repérable visuellement).
    - Clé présente avec None : chaîne vide (saisie incomplète tolérée).
    Pas d'échappement HTML ici : le gabarit Jinja s'en charge à l'affichage.
    """
    if not text or not params:
        return text or ""

    def repl(m: "re.Match[str]") -> str:
        k = m.group(1)
        if k not in params:
            return m.group(0)
        value = params[k]
        return "" if value is None else str(value)

    return TOKEN_PATTERN.sub(repl, text)


def texte(key: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Texte de clause prêt à composer ; chaîne vide si la clé n'existe pas."""
    raw = load_textes().get(key)
    if raw is None:
        logger.warning("texte manquant: %s", key)
        return ""
    return fill_placeholders(raw, params)
