# contrat/schemas.py
from __future__ import annotations

from datetime import date
from typing import Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

# --- Tolérance aux champs supplémentaires + enregistrements figés ---
class _ContratBase(BaseModel):
    model_config = ConfigDict(extra='allow', frozen=True)  # accepte des clés non déclarées

# Remplace BaseModel par notre base tolérante pour toutes les classes ci‑dessous
BaseModel = _ContratBase


# ---- Entrée : configuration du contrat

class CompanyProfile(BaseModel):
    name: str = ""
    address: str = ""
    siret: str = ""
    representative: str = ""
    collective_agreement: Optional[str] = None
    sector: Optional[str] = None

class EmployeeProfile(BaseModel):
    first_name: str = ""
    last_name: str = ""
    address: str = ""
    birth_date: Optional[date] = None
    nationality: Optional[str] = None
    social_security_number: Optional[str] = None
    gender: Optional[str] = Field(None, description="M | F | U (masculin par défaut)")

class BenefitsPackage(BaseModel):
    expense_reimbursement: bool = False
    transport_allowance: bool = False
    meal_vouchers: bool = False
    meal_voucher_amount: Optional[float] = None
    meal_voucher_employer_share: Optional[float] = None
    supplementary_insurance: bool = False
    supplementary_insurance_employer_share: Optional[float] = None
    company_phone: bool = False

class ContractTerms(BaseModel):
    contract_type: str = Field("CDI", description="CDI | CDD")
    weekly_hours: Optional[float] = 35
    position: str = ""
    is_executive: Optional[bool] = Field(None, description="None => déduit de la classification")
    classification: Optional[str] = None
    coefficient: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    fixed_term_reason: Optional[str] = None
    trial_period: bool = False
    trial_period_duration: Optional[str] = None
    missions: Optional[str] = None
    workplace: str = ""
    mobility_clause: bool = False
    mobility_radius: Optional[float] = None
    schedule_type: Optional[str] = Field(None, description="fixed | variable | shifts")
    working_days: Optional[str] = None
    salary: float = 0
    hourly_rate: Optional[float] = None
    payment_day: Optional[str] = None
    benefits: Optional[BenefitsPackage] = None
    custom_leaves: bool = False
    custom_leaves_details: Optional[str] = None
    non_compete: bool = False
    non_compete_duration: Optional[str] = None
    non_compete_area: Optional[str] = None
    non_compete_compensation: Optional[Union[float, str]] = None
    non_solicitation: bool = False
    notice_period: Optional[str] = Field(None, description="legal | 1-month | 2-months | 3-months | collective")
    teleworking: bool = False
    teleworking_days: Optional[float] = None
    teleworking_allowance: Optional[float] = None
    responsibility_level: Optional[str] = Field(None, description="entry | intermediate | expert | manager")
    signatory: Optional[str] = None
    signature_place: Optional[str] = None

class DisplayOptions(BaseModel):
    has_preamble: bool = True
    show_collective_agreement: bool = True
    include_data_protection: bool = True
    include_image_rights: bool = False
    include_work_rules: bool = False
    include_work_clothes: bool = False
    include_internal_rules: bool = False
    include_confidentiality: bool = False
    include_intellectual_property: bool = False
    include_teleworking: bool = False
    teleworking_type: Optional[str] = Field("regular", description="regular | occasional | mixed")
    employer_provides_equipment: bool = False
    show_signatures: bool = True

class ContractConfig(BaseModel):
    company: CompanyProfile = CompanyProfile()
    employee: EmployeeProfile = EmployeeProfile()
    terms: ContractTerms = ContractTerms()
    display: DisplayOptions = DisplayOptions()


# ---- Sortie : document assemblé

class RenderedClause(BaseModel):
    number: int
    key: str
    title: str
    body: str
    slot: Optional[int] = None  # None => clause dynamique (numérotée après 14)

class PartyBlock(BaseModel):
    title: str
    lines: Tuple[str, ...] = ()

class SignatureBlock(BaseModel):
    title: str
    lines: Tuple[str, ...] = ()

# Séquences en tuples : un document assemblé ne se modifie pas, il se reconstruit
class AssembledDocument(BaseModel):
    title: str
    subtitle: str
    contract_type: str
    is_part_time: bool = False
    is_executive: bool = False
    parties: Tuple[PartyBlock, ...] = ()
    preamble: Optional[str] = None
    clauses: Tuple[RenderedClause, ...] = ()
    signatures: Tuple[SignatureBlock, ...] = ()
    footer: str = ""
