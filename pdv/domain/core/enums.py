import enum


class OrderStatus(enum.Enum):
    pendente = "Pendente"
    preparando = "Preparando"
    pronto = "Pronto"
    em_entrega = "Em Entrega"
    entregue = "Entregue"
    concluido = "Concluído"
    cancelado = "Cancelado"
    arquivado = "Arquivado"


class PaymentKind(enum.Enum):
    cash = "cash"
    card = "card"
    wallet = "wallet"
    transfer = "transfer"
    other = "other"


class PaymentMode(enum.Enum):
    single = "single"
    split = "split"


class Severity(enum.Enum):
    error = "error"
    warning = "warning"
    info = "info"


class CartEvent(enum.Enum):
    added = "added"
    updated = "updated"
    removed = "removed"
    cleared = "cleared"
