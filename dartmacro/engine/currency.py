"""DartMUD coin conversion for the ``/convert`` directive.

The four coinage systems share one base unit:
1 minim (mn) = 1 fals (fs) = 1 lepton (lp) = 1 mon (mo).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Denomination:
    name: str
    plural: str
    abbr: str
    base_value: int
    metal: str

    def label(self, count: float) -> str:
        return self.name if count == 1 else self.plural


@dataclass(frozen=True)
class CurrencySystem:
    id: str
    name: str
    alt_name: str
    denominations: tuple[Denomination, ...]  # largest first


FERDARCHIAN = CurrencySystem(
    "ferdarchian",
    "Ferdarchian",
    "Eristan",
    (
        Denomination("gold sun", "gold suns", "Su", 1500, "gold"),
        Denomination("silver groat", "silver groats", "g", 500, "silver"),
        Denomination("silver penny", "silver pennies", "p", 100, "silver"),
        Denomination("silver farthing", "silver farthings", "f", 25, "silver"),
        Denomination("copper bit", "copper bits", "b", 5, "copper"),
        Denomination("copper minim", "copper minims", "mn", 1, "copper"),
    ),
)

TIRACHIAN = CurrencySystem(
    "tirachian",
    "Tirachian",
    "Soriktos",
    (
        Denomination("gold rial", "gold rials", "Ri", 5000, "gold"),
        Denomination("gold dinar", "gold dinars", "dn", 1000, "gold"),
        Denomination("silver dirham", "silver dirhams", "dh", 100, "silver"),
        Denomination("silver qirat", "silver qirats", "qt", 10, "silver"),
        Denomination("copper fals", "copper fulus", "fs", 1, "copper"),
    ),
)

EASTERLING = CurrencySystem(
    "easterling",
    "Easterling",
    "Easthaven",
    (
        Denomination("gold stater", "gold staters", "st", 1800, "gold"),
        Denomination("silver drachm", "silver drachms", "dr", 600, "silver"),
        Denomination("silver obol", "silver obols", "ob", 100, "silver"),
        Denomination("bronze chalkos", "bronze chalkoi", "ch", 10, "bronze"),
        Denomination("bronze lepton", "bronze lepta", "lp", 1, "bronze"),
    ),
)

ADACHIAN = CurrencySystem(
    "adachian",
    "Adachian",
    "Adachian",
    (
        Denomination("gold ryo", "gold ryo", "Ry", 4000, "gold"),
        Denomination("gold bu", "gold bu", "bu", 1000, "gold"),
        Denomination("silver shu", "silver shu", "sh", 250, "silver"),
        Denomination("bronze mon", "bronze mon", "mo", 1, "bronze"),
    ),
)

ALL_SYSTEMS: tuple[CurrencySystem, ...] = (FERDARCHIAN, TIRACHIAN, EASTERLING, ADACHIAN)

_ABBREVIATIONS: dict[str, tuple[CurrencySystem, Denomination]] = {}
_NAMES: dict[str, tuple[CurrencySystem, Denomination]] = {}
_SYSTEMS: dict[str, CurrencySystem] = {}

for _system in ALL_SYSTEMS:
    _SYSTEMS[_system.id] = _system
    _SYSTEMS[_system.name.lower()] = _system
    _SYSTEMS[_system.alt_name.lower()] = _system
    for _denom in _system.denominations:
        _entry = (_system, _denom)
        _ABBREVIATIONS[_denom.abbr.lower()] = _entry
        _NAMES[_denom.name.lower()] = _entry
        _NAMES[_denom.plural.lower()] = _entry
        # bare coin names: "groat", "rials"
        _NAMES.setdefault(_denom.name.split(" ", 1)[1].lower(), _entry)
        _NAMES.setdefault(_denom.plural.split(" ", 1)[1].lower(), _entry)

_TARGET_SPLIT = re.compile(r"(.+?)\s+to\s+(.+)", re.I)
_AMOUNT = re.compile(r"(\d+(?:\.\d+)?)\s*(.+)")

USAGE = "Usage: /convert <amount> <denomination> [to <system>]"


def find_denomination(text: str) -> tuple[CurrencySystem, Denomination] | None:
    key = text.strip().lower()
    return _ABBREVIATIONS.get(key) or _NAMES.get(key)


def find_system(text: str) -> CurrencySystem | None:
    return _SYSTEMS.get(text.strip().lower())


@dataclass
class CoinBreakdown:
    system: CurrencySystem
    coins: list[tuple[Denomination, int]] = field(default_factory=list)
    total_base: int = 0


@dataclass(frozen=True)
class ConvertRequest:
    amount: float
    denomination: Denomination
    system: CurrencySystem
    target: CurrencySystem | None = None


def break_down(base_amount: float, system: CurrencySystem) -> CoinBreakdown:
    """Largest-coin-first breakdown of a base-unit amount."""
    remaining = int(base_amount)
    breakdown = CoinBreakdown(system, total_base=remaining)
    for denom in system.denominations:
        count = remaining // denom.base_value
        if count > 0:
            breakdown.coins.append((denom, count))
            remaining -= count * denom.base_value
    return breakdown


def parse_convert_command(text: str) -> ConvertRequest | str:
    """Parse ``<amount> <denomination> [to <system>]``.

    Returns the request, or a message describing what is wrong with it.
    """
    trimmed = re.sub(r"^[/#]convert\s*", "", text.strip(), flags=re.I).strip()
    if not trimmed:
        return USAGE

    target_part: str | None = None
    split = _TARGET_SPLIT.fullmatch(trimmed)
    coin_part = trimmed
    if split:
        coin_part, target_part = split.group(1).strip(), split.group(2).strip()

    coin = _AMOUNT.fullmatch(coin_part)
    if coin is None:
        return f'Cannot parse "{coin_part}". {USAGE}'
    amount = float(coin.group(1))
    if amount <= 0:
        return "Amount must be a positive number."

    denom_text = coin.group(2).strip()
    found = find_denomination(denom_text)
    if found is None:
        return (
            f'Unknown denomination "{denom_text}". '
            "Try abbreviations like Su, g, p, Ri, dn, st, Ry."
        )

    target = None
    if target_part is not None:
        target = find_system(target_part)
        if target is None:
            return (
                f'Unknown currency system "{target_part}". '
                "Try: ferdarchian, tirachian, easterling, adachian."
            )

    system, denom = found
    return ConvertRequest(amount, denom, system, target)


def convert(request: ConvertRequest) -> tuple[CoinBreakdown, list[CoinBreakdown]]:
    base = request.amount * request.denomination.base_value
    source = break_down(base, request.system)
    if request.target is not None:
        targets = [request.target]
    else:
        targets = [system for system in ALL_SYSTEMS if system.id != request.system.id]
    return source, [break_down(base, system) for system in targets]


def _format_coins(breakdown: CoinBreakdown) -> str:
    if not breakdown.coins:
        return "0"
    return ", ".join(
        f"{count} {denom.label(count)} ({denom.abbr})" for denom, count in breakdown.coins
    )


def _format_amount(amount: float) -> str:
    return str(int(amount)) if amount.is_integer() else str(amount)


def format_conversion(request: ConvertRequest) -> list[str]:
    """Plain-text lines describing the conversion, one echo per line."""
    source, targets = convert(request)
    denom = request.denomination
    header = (
        f"{_format_amount(request.amount)} {denom.label(request.amount)} "
        f"({request.system.name})"
    )
    single_same_coin = len(source.coins) == 1 and source.coins[0][0].abbr == denom.abbr
    if source.coins and not single_same_coin:
        header = f"{header} = {_format_coins(source)}"

    lines = [header, "-" * 40, f"Base value: {source.total_base:,} units"]
    lines.extend(f"{target.system.name}: {_format_coins(target)}" for target in targets)
    return lines


def convert_to_lines(text: str) -> list[str]:
    """Parse and format in one step; parse problems come back as one line."""
    parsed = parse_convert_command(text)
    if isinstance(parsed, str):
        return [parsed]
    return format_conversion(parsed)
