# services/wallet.py
from __future__ import annotations

from typing import Any

from models.player import Currency, Player
from services.errors import InsufficientFunds, InvalidCurrency


def parse_currency(value: Any) -> Currency:
    try:
        return Currency(value)
    except ValueError:
        raise InvalidCurrency(f"unknown currency: {value!r}")


def credit(player: Player, currency: Currency, amount: int) -> int:
    """
    Додати валюту (від'ємне - ігнорується; для списань є debit).
    Повертає новий баланс.
    """
    currency = parse_currency(currency)
    amount = max(0, int(amount))
    player.currencies[currency] = player.balance(currency) + amount
    return player.currencies[currency]


def debit(player: Player, currency: Currency, amount: int) -> int:
    """
    Списати `amount`, якщо вистачає, інакше InsufficientFunds і баланс не чіпаємо.
    """
    currency = parse_currency(currency)
    amount = int(amount)
    cur = player.balance(currency)
    if amount < 0:
        raise ValueError("debit amount must be >= 0")
    if cur < amount:
        raise InsufficientFunds(f"not enough {currency.value}: have {cur}, need {amount}")

    player.currencies[currency] = cur - amount
    return player.currencies[currency]
