# contrat/services/calculs.py
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Union

# Constantes
FULL_TIME_WEEKLY_HOURS = 35
WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12
_SEP_MILLIERS = "\u202f"  # espace fine insécable (fr-FR)

DateLike = Union[date, datetime, str, None]


# -------- utilitaires généraux --------

def _to_float(val: Any) -> Optional[float]:
    """Convertit proprement vers float fini (supporte les virgules), sinon None."""
    if val is None or isinstance(val, bool):
        return None
    try:
        v = float(str(val).replace(",", ".").strip())
    except Exception:
        return None
    # NaN / infini : valeur inexploitable
    return v if math.isfinite(v) else None

def _parse_date(val: DateLike) -> Optional[Union[date, datetime]]:
    """ISO -> date/datetime ; None si vide ou illisible."""
    if val is None:
        return None
    if isinstance(val, (date, datetime)):
        return val
    s = str(val).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


# -------- formats d'affichage --------

def format_number(value: Any, decimals: Optional[int] = None) -> str:
    """
    Format numérique français :
      3000      -> '3 000'  (espace fine insécable)
      2500.5    -> '2 500,5'
      19.7802 (decimals=2) -> '19,78'
    Sans 'decimals' : au plus 3 décimales, zéros finaux supprimés.
    """
    v = _to_float(value)
    if v is None:
        return ""
    if decimals is not None:
        s = f"{v:,.{decimals}f}"
    else:
        s = f"{v:,.3f}".rstrip("0").rstrip(".")
    return s.replace(",", "\x00").replace(".", ",").replace("\x00", _SEP_MILLIERS)

def format_date(d: DateLike) -> str:
    """jj/mm/aaaa ; chaîne vide si la date est absente ou illisible."""
    p = _parse_date(d)
    if p is None:
        return ""
    return p.strftime("%d/%m/%Y")


# -------- calculs dérivés --------

def hourly_rate(salary: Any, weekly_hours: Any) -> Optional[float]:
    """
    Taux horaire brut = salaire / (heures hebdo × 52 / 12).
    None si les heures sont absentes ou ≤ 0 (taux indisponible).
    """
    s = _to_float(salary)
    h = _to_float(weekly_hours)
    if s is None or h is None or h <= 0:
        return None
    return s / (h * WEEKS_PER_YEAR / MONTHS_PER_YEAR)

def part_time_ratio(weekly_hours: Any) -> int:
    """Pourcentage d'un temps complet (35 h), arrondi à l'entier."""
    h = _to_float(weekly_hours) or 0.0
    # arrondi "demi vers le haut" (round() Python arrondit au pair)
    return int(math.floor(h / FULL_TIME_WEEKLY_HOURS * 100 + 0.5))

def days_between(start: DateLike, end: DateLike) -> Optional[int]:
    """Écart absolu en jours, arrondi au jour supérieur."""
    d0 = _parse_date(start)
    d1 = _parse_date(end)
    if d0 is None or d1 is None:
        return None
    # date et datetime ne se soustraient pas entre eux
    if isinstance(d0, datetime) != isinstance(d1, datetime):
        d0 = d0 if isinstance(d0, datetime) else datetime(d0.year, d0.month, d0.day)
        d1 = d1 if isinstance(d1, datetime) else datetime(d1.year, d1.month, d1.day)
    seconds = abs((d1 - d0).total_seconds())
    return int(math.ceil(seconds / 86400))

def duration_between(start: DateLike, end: DateLike) -> str:
    """
    Durée lisible entre deux dates :
      < 30 jours     -> 'N jours'
      30..364 jours  -> 'N mois'          (N = jours // 30)
      ≥ 365 jours    -> 'N an(s)' [+ ' et M mois']
    """
    days = days_between(start, end)
    if days is None:
        return ""
    if days < 30:
        return f"{days} jours"
    if days < 365:
        return f"{days // 30} mois"
    years = days // 365
    remaining_months = (days % 365) // 30
    label = f"{years} an{'s' if years > 1 else ''}"
    if remaining_months > 0:
        return f"{label} et {remaining_months} mois"
    return label


# -------- normalisations --------

def normalize_contract_type(value: Any) -> str:
    """UI -> 'CDI' | 'CDD' (CDI par défaut)."""
    v = str(value or "").strip().lower()
    if v in {"cdd", "fixed-term", "fixed_term", "determine", "déterminée", "determinee"}:
        return "CDD"
    return "CDI"

def _is_executive(terms: Any) -> bool:
    """Statut cadre : drapeau explicite, sinon mot 'cadre' dans la classification (hors 'non-cadre')."""
    flag = getattr(terms, "is_executive", None)
    if flag is not None:
        return bool(flag)
    c = (getattr(terms, "classification", None) or "").strip().lower()
    if not c or "non-cadre" in c or "non cadre" in c:
        return False
    return "cadre" in c


# -------- sac de valeurs dérivées --------

@dataclass(frozen=True)
class DerivedValues:
    contract_type: str
    is_cdi: bool
    is_part_time: bool
    is_executive: bool
    weekly_hours: str
    part_time_ratio: int
    hourly_rate: Optional[float]
    hourly_rate_text: str
    salary_text: str
    start_date: str
    end_date: str
    duration: str

def derive(config: Any) -> DerivedValues:
    """Calcule les valeurs non saisies directement (taux horaire, ratio, durée, dates)."""
    t = config.terms
    ctype = normalize_contract_type(t.contract_type)
    hours = _to_float(t.weekly_hours)
    # Un taux horaire saisi à 0 vaut "non saisi"
    override = _to_float(t.hourly_rate)
    rate = override if override else hourly_rate(t.salary, hours)
    return DerivedValues(
        contract_type=ctype,
        is_cdi=ctype == "CDI",
        is_part_time=hours is not None and hours < FULL_TIME_WEEKLY_HOURS,
        is_executive=_is_executive(t),
        weekly_hours=format_number(hours if hours is not None else FULL_TIME_WEEKLY_HOURS),
        part_time_ratio=part_time_ratio(hours),
        hourly_rate=rate,
        hourly_rate_text=format_number(rate, decimals=2) if rate is not None else "",
        salary_text=format_number(t.salary),
        start_date=format_date(t.start_date),
        end_date=format_date(t.end_date),
        duration=duration_between(t.start_date, t.end_date),
    )
