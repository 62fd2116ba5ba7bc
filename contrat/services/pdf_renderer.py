# contrat/services/pdf_renderer.py

from pathlib import Path
from datetime import datetime
from typing import List, Optional
from jinja2 import Environment, FileSystemLoader, select_autoescape
import logging
import os

from contrat.schemas import AssembledDocument

logger = logging.getLogger("contrat.pdf")

APP_DIR = Path(__file__).resolve().parents[1]
TEMPLATES_DIR = APP_DIR / "templates"
TEMPLATE_REL_PATH = "pdf/contrat.html.j2"


def _keep_html_debug() -> bool:
    return os.getenv("CONTRAT_KEEP_HTML_DEBUG", "0").lower() in {"1", "true", "yes"}

def out_dir() -> Path:
    env = (os.getenv("CONTRAT_OUT_DIR") or "").strip()
    return Path(env) if env else APP_DIR.parent / "var" / "generated"


def _paragraphs(body: Optional[str]) -> List[List[str]]:
    """Corps de clause -> paragraphes (séparés par une ligne vide) -> lignes."""
    if not body:
        return []
    return [p.split("\n") for p in body.split("\n\n") if p.strip()]


def _env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    env.filters["paragraphs"] = _paragraphs
    return env


def _write_pdf(html_str: str, target: Optional[str] = None):
    # Import tardif de WeasyPrint pour éviter de bloquer le démarrage si libs manquantes
    from weasyprint import HTML
    # write_pdf() sans target retourne directement des bytes
    return HTML(string=html_str, base_url=str(TEMPLATES_DIR)).write_pdf(target)


def render_html(document: AssembledDocument) -> str:
    html_tpl = _env().get_template(TEMPLATE_REL_PATH)
    return html_tpl.render(
        doc=document,
        generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    )


def render_pdf(document: AssembledDocument, out_name: Optional[str] = None) -> str:
    html_str = render_html(document)

    target = out_dir()
    target.mkdir(parents=True, exist_ok=True)
    if not out_name:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        out_name = f"{document.contract_type.lower()}_{ts}.pdf"
    out_path = target / out_name

    # Debug optionnel : garder l'HTML rendu à côté du PDF (désactivé par défaut)
    if _keep_html_debug():
        with open(out_path.with_suffix(".html"), "w", encoding="utf-8") as f:
            f.write(html_str)

    _write_pdf(html_str, str(out_path))
    logger.info("PDF généré: %s", out_path)
    return str(out_path)


# Rendu PDF en mémoire (pour l'aperçu)
def render_pdf_bytes(document: AssembledDocument) -> bytes:
    return _write_pdf(render_html(document))
