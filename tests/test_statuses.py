"""
Tests for order status rules.
"""

import pytest

from pdv.domain.core.enums import OrderStatus
from pdv.domain.order import statuses


class TestParseStatus:
    """Tests for status normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Em Entrega", OrderStatus.em_entrega),
            ("em_entrega", OrderStatus.em_entrega),
            ("EM-ENTREGA", OrderStatus.em_entrega),
            ("delivered", OrderStatus.entregue),
            ("Concluido", OrderStatus.concluido),
            ("Concluído", OrderStatus.concluido),
            ("cancelled", OrderStatus.cancelado),
            (" pendente ", OrderStatus.pendente),
            (OrderStatus.pronto, OrderStatus.pronto),
        ],
    )
    def test_aliases(self, raw, expected):
        assert statuses.parse_status(raw) is expected

    def test_unknown_and_empty(self):
        assert statuses.parse_status("xyz") is None
        assert statuses.parse_status("") is None
        assert statuses.parse_status(None) is None


class TestFinalLock:
    """Final statuses lock editing and advancing."""

    @pytest.mark.parametrize("status", ["Entregue", "Cancelado", "Concluído", "Arquivado"])
    def test_final_statuses(self, status):
        assert statuses.is_final(status)
        assert not statuses.can_edit(status)
        assert not statuses.can_advance(status)
        assert statuses.next_status(status) is None
        assert statuses.advance_request(status) is None

    def test_open_statuses_are_editable(self):
        assert statuses.can_edit("Pendente")
        assert statuses.can_edit(None)
        assert statuses.is_open("Em Entrega")

    def test_unknown_status_is_permissive(self):
        assert statuses.can_edit("Aguardando Motoboy")
        assert statuses.can_advance("Aguardando Motoboy")
        assert statuses.next_status("Aguardando Motoboy") is None

    def test_cannot_advance_without_status(self):
        assert not statuses.can_advance(None)
        assert not statuses.can_advance("  ")


class TestFlow:
    """Tests for next_status and transition requests."""

    def test_table_flow(self):
        assert statuses.next_status("Pendente") is OrderStatus.preparando
        assert statuses.next_status("Preparando") is OrderStatus.pronto
        assert statuses.next_status("Pronto") is OrderStatus.entregue

    def test_delivery_flow(self):
        assert statuses.next_status("Pronto", is_delivery=True) is OrderStatus.em_entrega
        assert statuses.next_status("Em Entrega", is_delivery=True) is OrderStatus.entregue
        assert statuses.next_status_name("Pronto", True) == "Em Entrega"

    def test_advance_request(self):
        assert statuses.advance_request("Pendente") == {"status": "Preparando"}

    def test_finalize_only_from_ready_or_on_route(self):
        assert statuses.can_finalize("Pronto")
        assert statuses.can_finalize("Em Entrega")
        assert not statuses.can_finalize("Pendente")
        assert not statuses.can_finalize("Entregue")
        assert statuses.finalize_request("Pronto") == {"status": "Entregue"}
        assert statuses.finalize_request("Preparando") is None

    def test_cancel(self):
        assert statuses.can_cancel(None)
        assert statuses.can_cancel("Preparando")
        assert not statuses.can_cancel("Entregue")
        assert statuses.cancel_request("Pendente") == {"status": "Cancelado"}

    def test_cancel_already_canceled_is_allowed(self):
        """Re-canceling keeps Cancelado and stays non-editable."""
        assert statuses.can_cancel("Cancelado")
        assert statuses.cancel_request("Cancelado") == {"status": "Cancelado"}
        assert not statuses.can_edit("Cancelado")


class TestPresentation:
    """Tests for labels, colors and descriptions."""

    def test_label(self):
        assert statuses.status_label("em_entrega") == "Em Entrega"
        assert statuses.status_label("Outro ") == "Outro"
        assert statuses.status_label(None) is None

    def test_color(self):
        assert statuses.status_color("Pronto") == "green"
        assert statuses.status_color("xyz") == "default"

    def test_description(self):
        assert statuses.status_description("Pendente") == "Aguardando processamento"
        assert statuses.status_description("xyz") == "xyz"
        assert statuses.status_description(None) == "Status desconhecido"
