"""
identity.py — The identity form: name, token symbol, LLM credential.
"""

import re
from dataclasses import dataclass
from typing import Callable

from .errors import InputError

NAME_RE = re.compile(r"^[A-Za-z0-9 _-]{1,50}$")
SYMBOL_MAX_LEN = 6


@dataclass(frozen=True)
class Identity:
    name: str
    symbol: str
    credential: str

    def __repr__(self):
        return f"Identity(name={self.name!r}, symbol={self.symbol!r}, credential=***)"


@dataclass
class FormInput:
    """Values supplied up front (flags/env). None means: ask."""

    name: str | None = None
    symbol: str | None = None
    credential: str | None = None


def validate_name(name: str) -> str:
    if not name:
        raise InputError("name required")
    if not NAME_RE.match(name):
        raise InputError("name: 1-50 chars, letters/numbers/spaces/dashes only")
    return name


def derive_symbol(name: str) -> str:
    """Default ticker: uppercase, alphanumerics only, at most 6 chars."""
    return re.sub(r"[^A-Z0-9]", "", name.upper())[:SYMBOL_MAX_LEN]


def collect_identity(form: FormInput, prompt: Callable[[str], str] = input) -> Identity:
    """Fill the form, prompting for anything not supplied. No side effects."""

    def ask(question: str) -> str:
        return prompt(question).strip()

    name = form.name if form.name is not None else ask("\n  name: ")
    name = validate_name(name.strip())

    default_symbol = derive_symbol(name)
    if form.symbol is not None:
        symbol = form.symbol.strip() or default_symbol
    else:
        symbol = ask(f"  token symbol [{default_symbol}]: ") or default_symbol

    credential = form.credential if form.credential is not None else ask(
        "  openrouter key (openrouter.ai): "
    )
    if not credential or not credential.strip():
        raise InputError("openrouter key required")

    return Identity(name=name, symbol=symbol, credential=credential.strip())
