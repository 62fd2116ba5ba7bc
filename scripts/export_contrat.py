#!/usr/bin/env python3
import sys
import json
import argparse
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from contrat.services.composer import assemble  # noqa: E402
from contrat.services.pdf_renderer import render_pdf  # noqa: E402


def load_config(p: Path):
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except Exception as e:
        print(f"[ERR] configuration illisible: {p}: {e}")
        return None


def export(config: dict, out_name=None, today=None) -> str:
    """Assemble la configuration et écrit le PDF (dossier CONTRAT_OUT_DIR ou var/generated)."""
    doc = assemble(config, today=today)
    return render_pdf(doc, out_name=out_name)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Génère le PDF d'un contrat à partir d'une configuration JSON")
    ap.add_argument("config", help="Fichier JSON (ContractConfig)")
    ap.add_argument("--out", help="Nom du fichier PDF (défaut: <type>_<horodatage>.pdf)")
    ap.add_argument("--today", type=date.fromisoformat, help="Date de signature (AAAA-MM-JJ)")
    args = ap.parse_args(argv)

    data = load_config(Path(args.config))
    if data is None:
        sys.exit(1)
    try:
        path = export(data, out_name=args.out, today=args.today)
    except Exception as e:
        print(f"[ERR] génération impossible: {e}")
        sys.exit(1)
    print(f"[OK] {path}")
    sys.exit(0)

if __name__ == "__main__":
    main()
