"""Seed data for a fresh ledger."""

from decimal import Decimal

from finpro.domain.entities import AccountType

TRANSFER_CATEGORY_NAME = "Transferencia"
DEBT_CATEGORY_NAME = "Deudas"

# (name, color, icon)
INITIAL_CATEGORIES = [
    ("Alimentación", "#ef4444", "🍔"),
    ("Vivienda", "#3b82f6", "🏠"),
    ("Transporte", "#f59e0b", "🚗"),
    ("Servicios", "#10b981", "⚡"),
    ("Suscripciones", "#8b5cf6", "📺"),
    ("Salario", "#22c55e", "💰"),
    (TRANSFER_CATEGORY_NAME, "#94a3b8", "🔄"),
    ("Otros", "#64748b", "📦"),
    (DEBT_CATEGORY_NAME, "#6366f1", "📉"),
]

# (name, type, opening balance, color, icon)
INITIAL_ACCOUNTS = [
    ("Efectivo", AccountType.CASH, Decimal("0"), "#10b981", "💵"),
    ("Banco Principal", AccountType.BANK, Decimal("0"), "#6366f1", "🏦"),
]

SETTLEMENT_LABEL = "Pago: {description}"
DEBT_PAYMENT_LABEL = "Abono a: {name}"
INSTALLMENT_LABEL = "Cuota: {name}"
INSTALLMENTS_PER_YEAR = 12
