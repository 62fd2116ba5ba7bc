import json
from pathlib import Path

import pytest

from contrat.services import pdf_renderer
from scripts.export_contrat import main


def _fake_write(html_str, target=None):
    Path(target).write_bytes(b"%PDF-1.7 test")


def test_export_writes_pdf(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(pdf_renderer, "_write_pdf", _fake_write)
    monkeypatch.setenv("CONTRAT_OUT_DIR", str(tmp_path))
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({
        "company": {"name": "Atelier Verne"},
        "terms": {"contract_type": "CDD", "start_date": "2025-01-06", "end_date": "2025-07-05"},
    }), encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main([str(cfg), "--out", "contrat.pdf", "--today", "2025-03-14"])
    assert exc.value.code == 0
    assert (tmp_path / "contrat.pdf").exists()
    assert "[OK]" in capsys.readouterr().out


def test_export_unreadable_config(tmp_path, capsys):
    cfg = tmp_path / "config.json"
    cfg.write_text("{pas du json", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main([str(cfg)])
    assert exc.value.code == 1
    assert "[ERR]" in capsys.readouterr().out


def test_export_invalid_config(tmp_path, capsys):
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"terms": {"weekly_hours": "beaucoup"}}), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main([str(cfg)])
    assert exc.value.code == 1
