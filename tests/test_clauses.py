from contrat.services import clauses
from contrat.services.clauses import select_clauses

NNBSP = "\u202f"


def _by_key(descriptors):
    return {d.key: d for d in descriptors}


def test_base_slots_always_present(make_config):
    got = select_clauses(make_config())
    assert [d.slot for d in got if d.slot is not None and d.slot <= 9] == list(range(1, 10))
    # Données personnelles incluses par défaut
    assert _by_key(got)["donnees"].slot == 10


def test_optional_slots_keep_their_number(make_config):
    terms = {"non_compete": True}
    without = select_clauses(make_config(terms=terms, display={"include_teleworking": True}))
    with_conf = select_clauses(make_config(terms=terms, display={"include_teleworking": True,
                                                                 "include_confidentiality": True}))
    assert [(d.slot, d.key) for d in without if d.slot and d.slot > 9] == [
        (10, "donnees"), (13, "non_concurrence"), (14, "teletravail")]
    assert [(d.slot, d.key) for d in with_conf if d.slot and d.slot > 9] == [
        (10, "donnees"), (12, "confidentialite"), (13, "non_concurrence"), (14, "teletravail")]


def test_dynamic_clauses_order(make_config):
    cfg = make_config(
        company={"sector": "IT"},
        terms={"teleworking": True, "teleworking_days": 2, "responsibility_level": "manager", "is_executive": True},
    )
    dyn = [d.key for d in select_clauses(cfg) if d.slot is None]
    assert dyn == ["teletravail_modalites", "delegation", "pi_renforcee", "forfait_jours"]


def test_dynamic_triggers_from_text(make_config):
    cfg = make_config(terms={"position": "Développeuse back-end", "classification": "Directeur technique"})
    dyn = [d.key for d in select_clauses(cfg) if d.slot is None]
    assert dyn == ["delegation", "pi_renforcee"]


def test_full_time_branch_uses_actual_hours(make_config):
    body = _by_key(select_clauses(make_config(terms={"weekly_hours": 39, "schedule_type": "fixed"})))["duree_travail"].body
    assert "fixé à 39 heures hebdomadaires" in body
    assert "Type d'horaires : Horaires fixes" in body
    assert "heures supplémentaires" in body


def test_part_time_branch(make_config):
    got = _by_key(select_clauses(make_config(terms={"weekly_hours": 20, "working_days": "lundi au mercredi"})))
    assert "20 heures par semaine, soit 57% d'un temps complet" in got["duree_travail"].body
    assert "Répartition des horaires : lundi au mercredi" in got["duree_travail"].body
    assert "57% du temps complet" in got["remuneration"].body
    assert "heures complémentaires" in got["remuneration"].body


def test_executive_takes_priority_over_part_time(make_config):
    body = _by_key(select_clauses(make_config(terms={"weekly_hours": 20, "is_executive": True})))["duree_travail"].body
    assert "forfait annuel en jours" in body
    assert "218 jours" in body
    assert "heures par semaine" not in body


def test_hourly_rate_fragment(make_config):
    body = _by_key(select_clauses(make_config()))["remuneration"].body
    assert f"3{NNBSP}000 €, correspondant à un taux horaire brut de 19,78 €." in body
    # heures à 0 : taux indisponible, fragment omis
    body0 = _by_key(select_clauses(make_config(terms={"weekly_hours": 0})))["remuneration"].body
    assert "taux horaire" not in body0


def test_cdd_without_end_date_keeps_sentence(make_config):
    cfg = make_config(terms={"contract_type": "CDD", "start_date": "2025-01-06", "end_date": None})
    body = _by_key(select_clauses(cfg))["nature"].body
    assert "Motif du recours au CDD :" in body
    assert "Il débutera le 06/01/2025 et prendra fin le , sauf cas" in body


def test_cdd_with_dates_shows_duration(make_config):
    cfg = make_config(terms={
        "contract_type": "CDD", "start_date": "2024-01-01", "end_date": "2024-06-30",
        "fixed_term_reason": "Accroissement temporaire d'activité",
    })
    got = _by_key(select_clauses(cfg))
    assert "Motif du recours au CDD : Accroissement temporaire d'activité" in got["nature"].body
    assert "prendra fin le 30/06/2024, soit une durée de 6 mois" in got["nature"].body
    assert "indemnité de fin de contrat" in got["remuneration"].body
    assert "accord commun" in got["rupture"].body


def test_trial_period_cap_only_for_cdd(make_config):
    trial = {"trial_period": True, "trial_period_duration": "2 mois"}
    cdi = _by_key(select_clauses(make_config(terms=trial)))["entree"].body
    cdd = _by_key(select_clauses(make_config(terms={**trial, "contract_type": "CDD"})))["entree"].body
    assert "période d'essai de 2 mois" in cdi
    assert "dans la limite de deux semaines" not in cdi
    assert "dans la limite de deux semaines" in cdd


def test_non_compete_only_for_cdi(make_config):
    nc = {"non_compete": True, "non_compete_duration": "12 mois", "non_compete_area": "50 km",
          "non_compete_compensation": 30}
    cdi = _by_key(select_clauses(make_config(terms=nc)))
    cdd = _by_key(select_clauses(make_config(terms={**nc, "contract_type": "CDD"})))
    assert cdi["non_concurrence"].slot == 13
    assert "égale à 30% de la moyenne" in cdi["non_concurrence"].body
    assert "non_concurrence" not in cdd


def test_notice_period_mapping(make_config):
    def rupture(notice):
        return _by_key(select_clauses(make_config(terms={"notice_period": notice})))["rupture"].body
    assert "préavis applicable de 2 mois." in rupture("2-months")
    assert "selon la convention collective." in rupture("collective")
    assert "selon la convention collective ou la loi." in rupture("legal")
    assert "selon la convention collective ou la loi." in rupture(None)


def test_gender_agreement_in_bodies(make_config):
    fem = _by_key(select_clauses(make_config(employee={"gender": "F"})))
    masc = _by_key(select_clauses(make_config()))
    assert "La Salariée est engagée en qualité de Comptable." in fem["fonctions"].body
    assert "Le Salarié est engagé en qualité de Comptable." in masc["fonctions"].body


def test_benefits_list(make_config):
    cfg = make_config(terms={"benefits": {"meal_vouchers": True, "meal_voucher_amount": 9.5,
                                          "meal_voucher_employer_share": 60, "company_phone": True}})
    body = _by_key(select_clauses(cfg))["avantages"].body
    assert "Tickets restaurant d'une valeur de 9,5€ (dont 60% pris en charge par l'employeur)" in body
    assert "Téléphone professionnel" in body
    none = _by_key(select_clauses(make_config()))["avantages"].body
    assert "Aucun avantage spécifique" in none


def test_builder_failure_gives_empty_body(make_config, monkeypatch, caplog):
    def boom(c):
        raise RuntimeError("panne")
    slots = tuple((s, k, boom if k == "entree" else b) for s, k, b in clauses.BASE_SLOTS)
    monkeypatch.setattr(clauses, "BASE_SLOTS", slots)
    got = _by_key(select_clauses(make_config()))
    assert got["entree"].slot == 2
    assert got["entree"].body == ""
    assert got["fonctions"].body
    assert "entree" in caplog.text


def test_reference_full_time_scenario(make_config):
    # CDI, 35 h, 3000 €, non cadre
    body = _by_key(select_clauses(make_config(terms={"weekly_hours": 35, "salary": 3000,
                                                     "is_executive": False})))["duree_travail"].body
    assert "Le temps de travail est fixé à 35 heures hebdomadaires" in body
    assert "heures par semaine" not in body
    assert "forfait annuel en jours" not in body


def test_image_rights_paragraph(make_config):
    with_image = _by_key(select_clauses(make_config(display={"include_image_rights": True})))["donnees"].body
    without = _by_key(select_clauses(make_config()))["donnees"].body
    assert "Droit à l'image : Le Salarié autorise l'Employeur" in with_image
    assert "Droit à l'image" not in without
    assert "Règlement Général sur la Protection des Données" in without
    off = _by_key(select_clauses(make_config(display={"include_data_protection": False,
                                                      "include_image_rights": True})))
    assert "donnees" not in off


def test_work_clothes_text(make_config):
    body = _by_key(select_clauses(make_config(display={"include_work_clothes": True})))["tenue"].body
    assert "consignes internes de l'entreprise, notamment les règles relatives à la tenue vestimentaire." in body
    assert "Une tenue professionnelle est requise." in body
    assert "adopter une tenue vestimentaire" not in body


def test_work_rules_generic_conduct(make_config):
    got = _by_key(select_clauses(make_config(display={"include_work_rules": True})))
    body = got["tenue"].body
    assert got["tenue"].slot == 11
    assert "consignes internes de l'entreprise." in body
    assert "adopter une tenue vestimentaire et un comportement" in body
    assert "Une tenue professionnelle est requise" not in body
    assert "règlement intérieur dont" not in body
    assert "tenue" not in _by_key(select_clauses(make_config()))


def test_internal_rules_sentence(make_config):
    fem = _by_key(select_clauses(make_config(
        employee={"gender": "F"},
        display={"include_internal_rules": True, "include_work_clothes": True},
    )))["tenue"].body
    assert ("notamment le règlement intérieur dont elle reconnaît avoir pris connaissance "
            "et les règles relatives à la tenue vestimentaire.") in fem
    only_rules = _by_key(select_clauses(make_config(display={"include_internal_rules": True})))["tenue"].body
    assert "notamment le règlement intérieur dont il reconnaît avoir pris connaissance." in only_rules


def test_confidentiality_sub_paragraphs(make_config):
    ip_only = _by_key(select_clauses(make_config(display={"include_intellectual_property": True})))
    conf_only = _by_key(select_clauses(make_config(display={"include_confidentiality": True})))
    assert ip_only["confidentialite"].slot == 12
    assert "Propriété intellectuelle :" in ip_only["confidentialite"].body
    assert "qu'il pourrait être amené à créer" in ip_only["confidentialite"].body
    assert "Confidentialité :" not in ip_only["confidentialite"].body
    assert "Confidentialité :" in conf_only["confidentialite"].body
    assert "Propriété intellectuelle :" not in conf_only["confidentialite"].body


def test_non_solicitation_paragraph(make_config):
    nc = {"non_compete": True, "non_compete_duration": "12 mois", "non_compete_area": "50 km"}
    with_ns = _by_key(select_clauses(make_config(terms={**nc, "non_solicitation": True})))["non_concurrence"].body
    without = _by_key(select_clauses(make_config(terms=nc)))["non_concurrence"].body
    assert "Clause de non-sollicitation" in with_ns
    assert "Clause de non-sollicitation" not in without
    assert "pendant une durée de 12 mois et dans un rayon de 50 km" in without


def test_compensation_percent_sign_not_doubled(make_config):
    body = _by_key(select_clauses(make_config(terms={
        "non_compete": True, "non_compete_compensation": "30 %",
    })))["non_concurrence"].body
    assert "égale à 30% de la moyenne" in body
    assert "%%" not in body


def test_teleworking_type_labels(make_config):
    def body(**display):
        return _by_key(select_clauses(make_config(display={"include_teleworking": True, **display})))["teletravail"].body
    assert "Type de télétravail : Télétravail régulier" in body()
    assert "Type de télétravail : Télétravail occasionnel" in body(teleworking_type="occasional")
    assert "Type de télétravail : Télétravail mixte (régulier et occasionnel)" in body(teleworking_type="mixed")


def test_teleworking_equipment(make_config):
    def body(provided):
        return _by_key(select_clauses(make_config(display={
            "include_teleworking": True, "employer_provides_equipment": provided,
        })))["teletravail"].body
    assert "L'employeur fournira au Salarié les équipements nécessaires" in body(True)
    assert "utilisera ses propres équipements" not in body(True)
    assert "Le Salarié utilisera ses propres équipements" in body(False)
    assert "L'employeur fournira" not in body(False)


def test_mobility_clause(make_config):
    mob = _by_key(select_clauses(make_config(terms={"mobility_clause": True, "mobility_radius": 50})))["lieu"].body
    fixed = _by_key(select_clauses(make_config()))["lieu"].body
    assert "Clause de mobilité : Le Salarié pourra être amené à exercer" in mob
    assert "dans un rayon de 50 km" in mob
    assert "vie privée et familiale du Salarié" in mob
    assert "se réserve la possibilité de modifier ce lieu" not in mob
    assert "Clause de mobilité" not in fixed
    assert "L'Employeur se réserve la possibilité de modifier ce lieu" in fixed


def test_custom_leaves(make_config):
    details = "2 jours supplémentaires par tranche de 5 ans d'ancienneté"
    with_leaves = _by_key(select_clauses(make_config(terms={"custom_leaves": True,
                                                            "custom_leaves_details": details})))["conges"].body
    flag_off = _by_key(select_clauses(make_config(terms={"custom_leaves": False,
                                                         "custom_leaves_details": details})))["conges"].body
    assert f"Congés supplémentaires : {details}" in with_leaves
    assert "Congés supplémentaires" not in flag_off
    cdd = _by_key(select_clauses(make_config(terms={"contract_type": "CDD"})))["conges"].body
    assert "compensés par une indemnité en fin de contrat si non pris" in cdd
    assert "compensés par une indemnité" not in flag_off


def test_benefits_expense_transport_insurance(make_config):
    body = _by_key(select_clauses(make_config(terms={"benefits": {
        "expense_reimbursement": True, "transport_allowance": True,
        "supplementary_insurance": True, "supplementary_insurance_employer_share": 50,
    }})))["avantages"].body
    assert "• Remboursement des frais professionnels sur présentation de justificatifs" in body
    assert "• Remboursement des frais de transport à hauteur de 50%" in body
    assert "• Mutuelle d'entreprise avec une prise en charge employeur de 50%" in body
    assert "Tickets restaurant" not in body
    assert "Aucun avantage spécifique" not in body
