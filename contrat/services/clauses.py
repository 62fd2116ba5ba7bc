# contrat/services/clauses.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from contrat.services.calculs import DerivedValues, derive, format_number, _to_float
from contrat.services.genre import GenreStrategy, resolve_genre
from contrat.services.textes import texte

logger = logging.getLogger("contrat.clauses")

# Constantes
FORFAIT_JOURS = 218
NOTICE_DURATIONS = {
    "1-month": "1 mois",
    "2-months": "2 mois",
    "3-months": "3 mois",
}
MANAGER_KEYWORDS = ("manager", "directeur")
DEVELOPER_KEYWORDS = ("développeur", "développeuse", "developpeur", "developpeuse", "developer")
IT_SECTORS = {"IT"}


@dataclass(frozen=True)
class ClauseDescriptor:
    slot: Optional[int]    # None => clause dynamique, numérotée après les emplacements fixes
    key: str
    title: str
    body: str


class ClauseContext:
    """Tout ce dont un rédacteur de clause a besoin : configuration, valeurs dérivées, accords."""

    def __init__(self, config: Any, derived: DerivedValues, genre: GenreStrategy):
        self.config = config
        self.company = config.company
        self.employee = config.employee
        self.terms = config.terms
        self.display = config.display
        self.derived = derived
        self.genre = genre
        self._tokens = genre.tokens()

    def t(self, key: str, **params: Any) -> str:
        return texte(key, {**self._tokens, **params})


# -------- assemblage de texte --------

def paragraphs(*parts: Optional[str]) -> str:
    return "\n\n".join(p for p in parts if p)

def lines(*parts: Optional[str]) -> str:
    return "\n".join(p for p in parts if p)

def _fmt_value(val: Any) -> Optional[str]:
    """Nombre -> format français ; texte libre laissé tel quel ; None conservé."""
    if val is None:
        return None
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return format_number(val)
    s = str(val).strip()
    # "30%" -> "30" : le symbole est porté par le texte
    num = s[:-1].strip() if s.endswith("%") else s
    return format_number(num) if _to_float(num) is not None else s

def _contains_any(text: Optional[str], keywords: Tuple[str, ...]) -> bool:
    low = (text or "").lower()
    return any(k in low for k in keywords)


# ==================== Articles de base (1 à 9) ====================

def _nature(c: ClauseContext) -> str:
    d, t = c.derived, c.terms
    if d.is_cdi:
        conv = ""
        if c.company.collective_agreement and c.display.show_collective_agreement:
            conv = c.t("nature.cdi.convention", convention=c.company.collective_agreement)
        return paragraphs(
            c.t("nature.cdi.intro", date_debut=d.start_date),
            c.t("nature.cdi.regime", convention=conv),
        )
    # CDD : motif et date de fin rendus même vides (aperçu en cours de saisie)
    duree = c.t("nature.cdd.duree", duree=d.duration) if d.duration else ""
    return paragraphs(
        lines(
            c.t("nature.cdd.intro"),
            c.t("nature.cdd.motif", motif=t.fixed_term_reason),
            c.t("nature.cdd.dates", date_debut=d.start_date, date_fin=d.end_date, duree=duree),
        ),
        c.t("nature.cdd.regime"),
    )

def _entree(c: ClauseContext) -> str:
    d, t = c.derived, c.terms
    essai = ""
    if t.trial_period:
        # Plafond légal rappelé pour les seuls CDD
        essai = lines(
            c.t("entree.essai", duree_essai=t.trial_period_duration),
            c.t("entree.essai_plafond") if not d.is_cdi else "",
        )
    return paragraphs(c.t("entree.debut", date_debut=d.start_date), essai)

def _fonctions(c: ClauseContext) -> str:
    d, t = c.derived, c.terms
    classification = ""
    if t.classification:
        coeff = c.t("fonctions.coefficient", coefficient=t.coefficient) if t.coefficient else ""
        classification = c.t("fonctions.classification", classification=t.classification, coefficient=coeff)
    statut = c.t("fonctions.statut_cadre" if d.is_executive else "fonctions.statut_non_cadre")
    missions = (t.missions or "").strip() or c.t("fonctions.missions_defaut")
    return paragraphs(
        lines(
            c.t("fonctions.engagement", poste=t.position, classification=classification),
            c.t("fonctions.statut", statut=statut),
        ),
        c.t("fonctions.missions", missions=missions),
        c.t("fonctions.diligence"),
    )

def _lieu(c: ClauseContext) -> str:
    t = c.terms
    adresse = c.t("lieu.adresse", adresse=t.workplace)
    if t.mobility_clause:
        return paragraphs(
            adresse,
            c.t("lieu.mobilite", rayon=_fmt_value(t.mobility_radius)),
            c.t("lieu.deplacements"),
        )
    return paragraphs(lines(adresse, c.t("lieu.sans_mobilite")), c.t("lieu.deplacements"))

def _duree_travail(c: ClauseContext) -> str:
    d, t = c.derived, c.terms
    # Cadre prioritaire sur le temps partiel
    if d.is_executive:
        return paragraphs(
            c.t("duree_travail.cadre.autonomie"),
            c.t("duree_travail.cadre.forfait", jours_forfait=FORFAIT_JOURS),
            c.t("duree_travail.cadre.repos"),
        )
    if d.is_part_time:
        repartition = ""
        if (t.working_days or "").strip():
            repartition = c.t("duree_travail.partiel.repartition", jours=t.working_days.strip())
        return paragraphs(
            c.t("duree_travail.partiel.volume", heures=d.weekly_hours, ratio=d.part_time_ratio),
            repartition,
            c.t("duree_travail.partiel.modification"),
            c.t("duree_travail.partiel.complementaires"),
        )
    horaires = ""
    st = (t.schedule_type or "").strip().lower()
    if st:
        kind = st if st in {"fixed", "variable"} else "shifts"
        horaires = c.t("duree_travail.plein.horaires",
                       type_horaires=c.t(f"duree_travail.plein.horaires_{kind}"))
    return paragraphs(
        c.t("duree_travail.plein.volume", heures=d.weekly_hours),
        horaires,
        c.t("duree_travail.plein.modification"),
        c.t("duree_travail.plein.supplementaires"),
    )

def _remuneration(c: ClauseContext) -> str:
    d, t = c.derived, c.terms
    taux = c.t("remuneration.taux", taux=d.hourly_rate_text) if d.hourly_rate_text else ""
    prorata = c.t("remuneration.prorata", ratio=d.part_time_ratio) if d.is_part_time else ""
    versement = ""
    if str(t.payment_day or "").strip():
        versement = c.t("remuneration.versement", jour=str(t.payment_day).strip())
    return paragraphs(
        c.t("remuneration.salaire", salaire=d.salary_text, taux=taux, prorata=prorata),
        versement,
        c.t("remuneration.elements"),
        c.t("remuneration.heures_complementaires" if d.is_part_time else "remuneration.heures_supplementaires"),
        c.t("remuneration.precarite") if not d.is_cdi else "",
    )

def _avantages(c: ClauseContext) -> str:
    b = c.terms.benefits
    flags = b is not None and any((
        b.expense_reimbursement, b.transport_allowance, b.meal_vouchers,
        b.supplementary_insurance, b.company_phone,
    ))
    if not flags:
        return paragraphs(c.t("avantages.aucun"), c.t("avantages.aucun_frais"))
    bullets = [
        c.t("avantages.frais") if b.expense_reimbursement else "",
        c.t("avantages.transport") if b.transport_allowance else "",
        c.t("avantages.tickets",
            montant=_fmt_value(b.meal_voucher_amount),
            part=_fmt_value(b.meal_voucher_employer_share)) if b.meal_vouchers else "",
        c.t("avantages.mutuelle",
            part=_fmt_value(b.supplementary_insurance_employer_share)) if b.supplementary_insurance else "",
        c.t("avantages.telephone") if b.company_phone else "",
    ]
    return paragraphs(lines(c.t("avantages.intro"), *bullets), c.t("avantages.regime"))

def _conges(c: ClauseContext) -> str:
    d, t = c.derived, c.terms
    acquisition = c.t("conges.acquisition")
    if not d.is_cdi:
        acquisition = f"{acquisition} {c.t('conges.cdd_indemnite')}"
    supplementaires = ""
    if t.custom_leaves and (t.custom_leaves_details or "").strip():
        supplementaires = c.t("conges.supplementaires", details=t.custom_leaves_details.strip())
    return paragraphs(
        acquisition,
        c.t("conges.dates"),
        supplementaires,
        c.t("conges.absences"),
        c.t("conges.justification"),
    )

def _rupture(c: ClauseContext) -> str:
    if not c.derived.is_cdi:
        return paragraphs(c.t("rupture.cdd.motifs"), c.t("rupture.cdd.dommages"))
    notice = (c.terms.notice_period or "").strip().lower()
    if notice in NOTICE_DURATIONS:
        preavis = c.t("rupture.cdi.preavis_duree", preavis=NOTICE_DURATIONS[notice])
    elif notice == "collective":
        preavis = c.t("rupture.cdi.preavis_convention")
    else:
        preavis = c.t("rupture.cdi.preavis_defaut")
    return paragraphs(preavis, c.t("rupture.cdi.licenciement"), c.t("rupture.cdi.demission"))


# ==================== Articles optionnels (10 à 14) ====================

def _donnees(c: ClauseContext) -> str:
    return paragraphs(
        c.t("donnees.collecte"),
        c.t("donnees.droits"),
        c.t("donnees.image") if c.display.include_image_rights else "",
    )

def _tenue(c: ClauseContext) -> str:
    o = c.display
    objets = [
        c.t("tenue.reglement") if o.include_internal_rules else "",
        c.t("tenue.vetements") if o.include_work_clothes else "",
    ]
    joined = c.t("tenue.et").join(x for x in objets if x)
    notamment = c.t("tenue.notamment", objets=joined) if joined else ""
    return paragraphs(
        c.t("tenue.consignes", objets=notamment),
        c.t("tenue.tenue_fournie") if o.include_work_clothes else c.t("tenue.comportement"),
        c.t("tenue.sanctions"),
    )

def _confidentialite(c: ClauseContext) -> str:
    o = c.display
    return paragraphs(
        c.t("confidentialite.secret") if o.include_confidentiality else "",
        c.t("confidentialite.propriete") if o.include_intellectual_property else "",
    )

def _non_concurrence(c: ClauseContext) -> str:
    t = c.terms
    return paragraphs(
        c.t("non_concurrence.interdiction", duree=t.non_compete_duration, zone=t.non_compete_area),
        c.t("non_concurrence.activites"),
        c.t("non_concurrence.contrepartie", pourcentage=_fmt_value(t.non_compete_compensation)),
        c.t("non_concurrence.liberation"),
        c.t("non_concurrence.non_sollicitation") if t.non_solicitation else "",
    )

def _teletravail(c: ClauseContext) -> str:
    o = c.display
    tt = (o.teleworking_type or "").strip().lower()
    kind = tt if tt in {"regular", "occasional"} else "mixed"
    equipement = "teletravail.equipement_employeur" if o.employer_provides_equipment else "teletravail.equipement_personnel"
    return paragraphs(
        c.t("teletravail.intro"),
        c.t("teletravail.type", type=c.t(f"teletravail.type_{kind}")),
        c.t("teletravail.organisation"),
        c.t(equipement),
        c.t("teletravail.frais"),
        c.t("teletravail.securite"),
    )


# ==================== Clauses additionnelles (15+) ====================

def _teletravail_modalites(c: ClauseContext) -> str:
    t = c.terms
    indemnite = ""
    if _to_float(t.teleworking_allowance):
        indemnite = " " + c.t("additionnelles.teletravail_indemnite", montant=_fmt_value(t.teleworking_allowance))
    return c.t("additionnelles.teletravail", jours=_fmt_value(t.teleworking_days), indemnite=indemnite)

def _delegation(c: ClauseContext) -> str:
    return c.t("additionnelles.delegation")

def _pi_renforcee(c: ClauseContext) -> str:
    return c.t("additionnelles.pi_renforcee")

def _forfait_jours(c: ClauseContext) -> str:
    return c.t("additionnelles.forfait_jours", jours_forfait=FORFAIT_JOURS)


# -------- déclencheurs --------

def is_manager(c: ClauseContext) -> bool:
    level = (c.terms.responsibility_level or "").strip().lower()
    return level == "manager" or _contains_any(c.terms.classification, MANAGER_KEYWORDS)

def is_it_profile(c: ClauseContext) -> bool:
    sector = (c.company.sector or "").strip().upper()
    return sector in IT_SECTORS or _contains_any(c.terms.position, DEVELOPER_KEYWORDS)


# ==================== Tables de sélection ====================

Builder = Callable[[ClauseContext], str]
Predicate = Callable[[ClauseContext], bool]

# (emplacement, clé, rédacteur) : toujours présents
BASE_SLOTS: Tuple[Tuple[int, str, Builder], ...] = (
    (1, "nature", _nature),
    (2, "entree", _entree),
    (3, "fonctions", _fonctions),
    (4, "lieu", _lieu),
    (5, "duree_travail", _duree_travail),
    (6, "remuneration", _remuneration),
    (7, "avantages", _avantages),
    (8, "conges", _conges),
    (9, "rupture", _rupture),
)

# (emplacement, clé, présence, rédacteur) : un article absent ne décale pas les suivants
OPTIONAL_SLOTS: Tuple[Tuple[int, str, Predicate, Builder], ...] = (
    (10, "donnees", lambda c: c.display.include_data_protection, _donnees),
    (11, "tenue", lambda c: (c.display.include_work_rules
                             or c.display.include_work_clothes
                             or c.display.include_internal_rules), _tenue),
    (12, "confidentialite", lambda c: (c.display.include_confidentiality
                                       or c.display.include_intellectual_property), _confidentialite),
    (13, "non_concurrence", lambda c: c.terms.non_compete and c.derived.is_cdi, _non_concurrence),
    (14, "teletravail", lambda c: c.display.include_teleworking, _teletravail),
)

# (clé, clé de titre, déclencheur, rédacteur) : ordre de génération fixe
DYNAMIC_CLAUSES: Tuple[Tuple[str, str, Predicate, Builder], ...] = (
    ("teletravail_modalites", "teletravail", lambda c: c.terms.teleworking, _teletravail_modalites),
    ("delegation", "delegation", is_manager, _delegation),
    ("pi_renforcee", "pi_renforcee", is_it_profile, _pi_renforcee),
    ("forfait_jours", "forfait_jours", lambda c: c.derived.is_executive, _forfait_jours),
)


def _safe_build(key: str, builder: Builder, c: ClauseContext) -> str:
    """Rédige une clause ; en cas d'échec, corps vide plutôt qu'une exception."""
    try:
        return builder(c)
    except Exception as e:
        logger.exception("rédaction de la clause '%s' impossible: %s", key, e)
        return ""

def _safe_predicate(key: str, predicate: Predicate, c: ClauseContext) -> bool:
    try:
        return bool(predicate(c))
    except Exception as e:
        logger.exception("condition de la clause '%s' non évaluable: %s", key, e)
        return False


def build_context(config: Any, derived: Optional[DerivedValues] = None,
                  genre: Optional[GenreStrategy] = None) -> ClauseContext:
    return ClauseContext(
        config,
        derived or derive(config),
        genre or resolve_genre(getattr(config.employee, "gender", None)),
    )


def select_clauses(config: Any, derived: Optional[DerivedValues] = None,
                   genre: Optional[GenreStrategy] = None) -> List[ClauseDescriptor]:
    """
    Liste ordonnée des clauses du contrat :
      - articles 1 à 9, toujours présents ;
      - articles 10 à 14, chacun à son emplacement fixe s'il est retenu ;
      - clauses additionnelles (emplacement None), dans l'ordre de DYNAMIC_CLAUSES.
    """
    c = build_context(config, derived, genre)
    out: List[ClauseDescriptor] = []

    for slot, key, builder in BASE_SLOTS:
        out.append(ClauseDescriptor(slot, key, c.t(f"titres.{key}"), _safe_build(key, builder, c)))

    for slot, key, predicate, builder in OPTIONAL_SLOTS:
        if _safe_predicate(key, predicate, c):
            out.append(ClauseDescriptor(slot, key, c.t(f"titres.{key}"), _safe_build(key, builder, c)))

    for key, title_key, trigger, builder in DYNAMIC_CLAUSES:
        if _safe_predicate(key, trigger, c):
            out.append(ClauseDescriptor(None, key, c.t(f"titres.{title_key}"), _safe_build(key, builder, c)))

    return out

