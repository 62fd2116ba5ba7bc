#!/usr/bin/env python3
import sys
import re
import argparse
from pathlib import Path
import yaml

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from contrat.services.clauses import BASE_SLOTS, OPTIONAL_SLOTS, DYNAMIC_CLAUSES  # noqa: E402
from contrat.services.textes import DEFAULT_TEXTES, TOKEN_PATTERN, _flatten  # noqa: E402

# Jetons de genre disponibles dans tous les textes
GENRE_TOKENS = {"Le_salarie", "le_salarie", "du_salarie", "au_salarie", "LE_SALARIE", "e", "il"}

# Clés lues directement par l'assembleur (hors corps d'articles)
FIXED_KEYS = [
    "entete.titre", "entete.duree_cdi", "entete.duree_cdd",
    "entete.temps_partiel", "entete.temps_plein", "entete.statut_cadre",
    "parties.employeur_titre", "parties.siege", "parties.siret", "parties.representant",
    "parties.demeurant", "parties.naissance",
    "preambule.intro", "preambule.contexte", "preambule.relation_cdi", "preambule.relation_cdd",
    "signatures.employeur_titre", "signatures.pour", "signatures.fait_a",
    "signatures.blanc", "signatures.mention",
    "pied",
]

RAW_TOKEN = re.compile(r"\{\{(.*?)\}\}")


def load_yaml(p: Path):
    try:
        return yaml.safe_load(p.read_text(encoding="utf-8"))
    except Exception as e:
        print(f"[ERR] YAML invalide: {p}: {e}")
        return None


def required_keys():
    keys = list(FIXED_KEYS)
    keys += [f"titres.{key}" for _, key, _ in BASE_SLOTS]
    keys += [f"titres.{key}" for _, key, _, _ in OPTIONAL_SLOTS]
    keys += [f"titres.{title_key}" for _, title_key, _, _ in DYNAMIC_CLAUSES]
    return keys


def _check_leaves(node, path="textes"):
    """Chaque feuille doit être une chaîne (pas de liste, pas de nombre nu)."""
    ok = True
    if isinstance(node, dict):
        for k, v in node.items():
            ok = _check_leaves(v, f"{path}.{k}") and ok
    elif not isinstance(node, str):
        print(f"[ERR] {path} doit être une chaîne (trouvé {type(node).__name__})")
        ok = False
    return ok


def check_placeholders(key: str, text: str) -> bool:
    ok = True
    if text.count("{{") != text.count("}}"):
        print(f"[ERR] {key}: accolades déséquilibrées")
        ok = False
    for m in RAW_TOKEN.finditer(text):
        if not TOKEN_PATTERN.fullmatch(m.group(0)):
            print(f"[ERR] {key}: jeton invalide '{m.group(0)}'")
            ok = False
    return ok


def check_textes(data) -> bool:
    if not isinstance(data, dict) or not isinstance(data.get("textes"), dict):
        print("[ERR] doit contenir une clé 'textes: {...}'")
        return False
    ok = _check_leaves(data["textes"])
    flat = _flatten(data["textes"])
    for key in required_keys():
        if key not in flat:
            print(f"[ERR] clé manquante: {key}")
            ok = False
    for key, text in flat.items():
        ok = check_placeholders(key, text) and ok
    return ok


def used_tokens(data) -> set:
    flat = _flatten((data or {}).get("textes") or {})
    found = set()
    for text in flat.values():
        found.update(m.group(1) for m in TOKEN_PATTERN.finditer(text))
    return found


def main():
    ap = argparse.ArgumentParser(description="Vérifie le fichier des textes de clauses")
    ap.add_argument("path", nargs="?", default=str(DEFAULT_TEXTES), help="Fichier YAML à vérifier")
    ap.add_argument("--tokens", action="store_true", help="Lister les jetons utilisés (hors genre)")
    args = ap.parse_args()

    p = Path(args.path)
    data = load_yaml(p)
    ok = data is not None and check_textes(data)
    if ok:
        print(f"[OK] {p}")
    if args.tokens and data is not None:
        for tok in sorted(used_tokens(data) - GENRE_TOKENS):
            print(f"  {{{{{tok}}}}}")

    sys.exit(0 if ok else 1)

if __name__ == "__main__":
    main()
