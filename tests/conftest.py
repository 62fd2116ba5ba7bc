import pytest

from contrat.schemas import ContractConfig


BASE = {
    "company": {
        "name": "Atelier Verne",
        "address": "12 rue des Forges, 44000 Nantes",
        "siret": "123 456 789 00012",
        "representative": "Camille Durand",
    },
    "employee": {
        "first_name": "Alex",
        "last_name": "Martin",
        "address": "3 allée des Tilleuls, 44300 Nantes",
    },
    "terms": {
        "contract_type": "CDI",
        "weekly_hours": 35,
        "position": "Comptable",
        "start_date": "2025-01-06",
        "workplace": "12 rue des Forges, 44000 Nantes",
        "salary": 3000,
    },
    "display": {},
}


@pytest.fixture
def make_config():
    """Configuration de base ; chaque section peut être surchargée."""
    def _make(company=None, employee=None, terms=None, display=None) -> ContractConfig:
        data = {
            "company": {**BASE["company"], **(company or {})},
            "employee": {**BASE["employee"], **(employee or {})},
            "terms": {**BASE["terms"], **(terms or {})},
            "display": {**BASE["display"], **(display or {})},
        }
        return ContractConfig.model_validate(data)
    return _make
