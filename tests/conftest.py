import pytest

from guardian.config import config
from guardian.tenants import Tenant, TenantSettings


@pytest.fixture(autouse=True)
def no_ai_key(monkeypatch):
    # Tests never reach the hosted model unless they install a fake one
    monkeypatch.setattr(config, "GEMINI_API_KEY", "")


@pytest.fixture
def tenant():
    return Tenant(
        id="tenant-1",
        cnpj="11.222.333/0001-44",
        name="Test Co Ltda.",
        contact_email="contact@test.co",
        settings=TenantSettings(dpo_name="Ana DPO", dpo_email="dpo@test.co"),
    )
