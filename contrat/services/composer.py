# contrat/services/composer.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, List, Optional, Tuple

from contrat.schemas import (
    AssembledDocument, ContractConfig, PartyBlock, RenderedClause, SignatureBlock,
)
from contrat.services.calculs import DerivedValues, derive, format_date
from contrat.services.clauses import ClauseContext, ClauseDescriptor, build_context, paragraphs, select_clauses

logger = logging.getLogger("contrat.composer")

# Première numérotation des clauses additionnelles (après l'emplacement 14)
DYNAMIC_START = 15


def number_clauses(descriptors: Iterable[ClauseDescriptor]) -> List[RenderedClause]:
    """
    Numérotation finale :
      - une clause à emplacement fixe garde le numéro de son emplacement,
        même si des emplacements précédents sont vides ;
      - les clauses dynamiques sont numérotées 15, 16, … dans l'ordre reçu.
    """
    out: List[RenderedClause] = []
    next_dynamic = DYNAMIC_START
    for d in descriptors:
        if d.slot is not None:
            number = d.slot
        else:
            number = next_dynamic
            next_dynamic += 1
        out.append(RenderedClause(number=number, key=d.key, title=d.title, body=d.body, slot=d.slot))
    return out


# -------- en-tête & parties --------

def _title(c: ClauseContext) -> str:
    duree = c.t("entete.duree_cdi" if c.derived.is_cdi else "entete.duree_cdd")
    return c.t("entete.titre", duree=duree)

def _subtitle(d: DerivedValues, c: ClauseContext) -> str:
    temps = c.t("entete.temps_partiel" if d.is_part_time else "entete.temps_plein")
    return temps + (c.t("entete.statut_cadre") if d.is_executive else "")

def _employer_block(c: ClauseContext) -> PartyBlock:
    co = c.company
    lines = [
        co.name,
        c.t("parties.siege", adresse=co.address),
        c.t("parties.siret", siret=co.siret),
        c.t("parties.representant", representant=co.representative),
    ]
    if co.collective_agreement and c.display.show_collective_agreement:
        lines.append(c.t("parties.convention", convention=co.collective_agreement))
    return PartyBlock(title=c.t("parties.employeur_titre"), lines=tuple(lines))

def _full_name(c: ClauseContext) -> str:
    e = c.employee
    return f"{e.first_name or ''} {e.last_name or ''}".strip()

def _employee_block(c: ClauseContext) -> PartyBlock:
    e = c.employee
    lines = [_full_name(c), c.t("parties.demeurant", adresse=e.address)]
    if e.birth_date:
        lines.append(c.t("parties.naissance", date=format_date(e.birth_date)))
    if e.nationality:
        lines.append(c.t("parties.nationalite", nationalite=e.nationality))
    if e.social_security_number:
        lines.append(c.t("parties.secu", numero=e.social_security_number))
    return PartyBlock(title=c.genre.tokens()["LE_SALARIE"], lines=tuple(lines))

def _preamble(c: ClauseContext) -> Optional[str]:
    if not c.display.has_preamble:
        return None
    relation = c.t("preambule.relation_cdi" if c.derived.is_cdi else "preambule.relation_cdd")
    return paragraphs(c.t("preambule.intro"), c.t("preambule.contexte", relation=relation))

def _signatures(c: ClauseContext, today: date) -> Tuple[SignatureBlock, ...]:
    if not c.display.show_signatures:
        return ()
    t = c.terms
    lieu = (t.signature_place or "").strip() or c.t("signatures.blanc")
    fait_a = c.t("signatures.fait_a", lieu=lieu, date=format_date(today))
    mention = c.t("signatures.mention")
    signataire = (t.signatory or "").strip() or c.company.representative
    return (
        SignatureBlock(
            title=c.t("signatures.employeur_titre"),
            lines=(c.t("signatures.pour", societe=c.company.name, signataire=signataire), fait_a, mention),
        ),
        SignatureBlock(
            title=c.genre.tokens()["LE_SALARIE"],
            lines=(_full_name(c), fait_a, mention),
        ),
    )


# -------- assemblage --------

def assemble(config: Any, today: Optional[date] = None) -> AssembledDocument:
    """
    Assemble le contrat : en-tête, parties, préambule, clauses numérotées, signatures.
    Déterministe pour une même configuration (hors date du jour des signatures).
    Accepte un ContractConfig ou un dict compatible.
    """
    if not isinstance(config, ContractConfig):
        config = ContractConfig.model_validate(config)

    derived = derive(config)
    c = build_context(config, derived)
    clauses = number_clauses(select_clauses(config, derived, c.genre))

    doc = AssembledDocument(
        title=_title(c),
        subtitle=_subtitle(derived, c),
        contract_type=derived.contract_type,
        is_part_time=derived.is_part_time,
        is_executive=derived.is_executive,
        parties=(_employer_block(c), _employee_block(c)),
        preamble=_preamble(c),
        clauses=tuple(clauses),
        signatures=_signatures(c, today or date.today()),
        footer=c.t("pied"),
    )
    logger.debug(
        "contrat assemblé: type=%s clauses=%s",
        derived.contract_type, [(x.number, x.key) for x in clauses],
    )
    return doc
