# contrat/main.py

# Standard library
from datetime import date
from io import BytesIO
from typing import Optional
import logging

# Third-party
from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

# Local modules
from contrat.schemas import AssembledDocument, ContractConfig
from contrat.services.composer import assemble
from contrat.services.pdf_renderer import render_html, render_pdf_bytes

# --- logger minimal (n'affecte pas la prod) ---
logger = logging.getLogger("contrat")
if not logger.handlers:
    logging.basicConfig(level=logging.INFO)

VERSION = "0.1"

# --- app FastAPI ---
app = FastAPI(title="Contrat", version=VERSION)


@app.get("/api/health")
async def api_health():
    return {"status": "ok", "version": VERSION}


@app.post("/api/contrat/assemble", response_model=AssembledDocument)
async def api_assemble(config: ContractConfig, today: Optional[date] = None):
    return assemble(config, today=today)


@app.post("/api/contrat/preview", response_class=HTMLResponse)
async def api_preview(config: ContractConfig, today: Optional[date] = None):
    doc = assemble(config, today=today)
    return HTMLResponse(render_html(doc), status_code=200)


@app.post("/api/contrat/pdf")
async def api_pdf(config: ContractConfig, today: Optional[date] = None):
    doc = assemble(config, today=today)
    try:
        pdf_bytes = await run_in_threadpool(render_pdf_bytes, doc)
    except Exception as e:
        logger.exception("pdf render failed: %s", e)
        return JSONResponse({"error": "pdf_failed", "detail": str(e)}, status_code=500)
    filename = f"{doc.contract_type.lower()}.pdf"
    headers = {"Content-Disposition": f'inline; filename="{filename}"'}
    return StreamingResponse(BytesIO(pdf_bytes), media_type="application/pdf", headers=headers)
