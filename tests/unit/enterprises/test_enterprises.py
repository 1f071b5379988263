from __future__ import annotations

from uuid import uuid4

import pytest
from django.core.exceptions import ValidationError

from modules.enterprises.models import Enterprise
from modules.enterprises.repositories.django_repository import (
    EnterpriseDjangoRepository,
)

pytestmark = pytest.mark.unit


class TestEnterpriseModel:
    def test_cnpj_is_stored_as_digits(self):
        enterprise = Enterprise.objects.create(
            legal_name="Loja Azul Ltda", cnpj="11.222.333/0001-81"
        )

        enterprise.refresh_from_db()
        assert enterprise.cnpj == "11222333000181"

    @pytest.mark.parametrize("cnpj", ["11222333000180", "00000000000000", ""])
    def test_invalid_cnpj_rejected(self, cnpj):
        with pytest.raises(ValidationError) as exc:
            Enterprise(legal_name="Loja Azul Ltda", cnpj=cnpj).clean()

        assert "cnpj" in exc.value.message_dict

    def test_str_prefers_trade_name(self, enterprise):
        assert str(enterprise) == "Papelaria Central"

    def test_str_falls_back_to_legal_name(self):
        assert str(Enterprise(legal_name="Loja Azul Ltda")) == "Loja Azul Ltda"


class TestEnterpriseRepository:
    def test_exists(self, enterprise):
        repo = EnterpriseDjangoRepository()

        assert repo.exists(str(enterprise.id))
        assert not repo.exists(str(uuid4()))
        assert not repo.exists("garbage")

    def test_get_by_cnpj_accepts_formatted_input(self, enterprise):
        found = EnterpriseDjangoRepository().get_by_cnpj("11.222.333/0001-81")

        assert found == enterprise
