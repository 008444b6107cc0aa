"""
Catalog boundary — validate untyped catalog records into Product snapshots.

The catalog stores modifier options as loosely-typed JSON. They are parsed
once, here, into closed Modifier values; nothing past this module sees a
raw mapping.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from kungfu import Result, Ok, Error

from tillflow._types import parse_amount, ZERO
from tillflow.pricing._types import Modifier, Product, CatalogError

# ═══════════════════════════════════════════════════════════════════════════════
# Field Lookup
# ═══════════════════════════════════════════════════════════════════════════════


def _first(raw: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in raw and raw[name] is not None:
            return raw[name]
    return None


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# ═══════════════════════════════════════════════════════════════════════════════
# parse_modifiers()
# ═══════════════════════════════════════════════════════════════════════════════


def parse_modifiers(raw: Any) -> Result[tuple[Modifier, ...], CatalogError]:
    """
    Parse modifier options.

    None, "", "null" and [] all mean "no modifiers available".
    """
    if raw is None:
        return Ok(())
    if isinstance(raw, str):
        if not raw.strip():
            return Ok(())
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            return Error(CatalogError(f"Modifier options are not valid JSON: {e.msg}"))
        if raw is None:
            return Ok(())
    if isinstance(raw, Mapping) or not isinstance(raw, Sequence):
        return Error(CatalogError("Modifier options must be a list"))

    modifiers: list[Modifier] = []
    problems: list[str] = []
    seen: set[str] = set()

    for index, item in enumerate(raw):
        if isinstance(item, Modifier):
            modifier = item
        elif isinstance(item, Mapping):
            name = str(item.get("name") or "").strip()
            category = str(item.get("category") or "").strip().lower()
            if not name or not category:
                problems.append(f"option {index}: name and category are required")
                continue
            delta_raw = _first(item, "priceDelta", "price_delta", "price")
            delta = ZERO if delta_raw is None else parse_amount(delta_raw)
            if delta is None:
                problems.append(f"option {index}: invalid price {delta_raw!r}")
                continue
            mod_id = str(item.get("id") or f"{category}:{name}".lower())
            modifier = Modifier(id=mod_id, name=name, category=category, price_delta=delta)
        else:
            problems.append(f"option {index}: expected an object")
            continue

        if modifier.id in seen:
            problems.append(f"option {index}: duplicate id {modifier.id!r}")
            continue
        seen.add(modifier.id)
        modifiers.append(modifier)

    if problems:
        return Error(CatalogError("Invalid modifier options", details=tuple(problems)))
    return Ok(tuple(modifiers))


# ═══════════════════════════════════════════════════════════════════════════════
# parse_product()
# ═══════════════════════════════════════════════════════════════════════════════


def parse_product(raw: Mapping[str, Any]) -> Result[Product, CatalogError]:
    """
    Validate a catalog record.

    Accepts both the catalog's camelCase keys and snake_case.

    Example:
        parse_product({
            "id": 7,
            "name": "Latte",
            "price": "4.00",
            "modificationOptions": '[{"name": "Large", "category": "size", "price": 0.75}]',
        })
    """
    product_id = _first(raw, "id")
    if product_id is None:
        return Error(CatalogError("Product record has no id"))
    product_id = str(product_id)

    name = str(_first(raw, "name") or "").strip()
    if not name:
        return Error(CatalogError("Product record has no name", product_id))

    price_raw = _first(raw, "basePrice", "base_price", "price")
    price = parse_amount(price_raw)
    if price is None:
        return Error(CatalogError(f"Invalid price {price_raw!r}", product_id))
    if price < 0:
        return Error(CatalogError("Price cannot be negative", product_id))

    match parse_modifiers(
        _first(raw, "modifierOptions", "modifier_options", "modificationOptions", "modification_options")
    ):
        case Ok(options):
            pass
        case Error(e):
            return Error(CatalogError(e.message, product_id, e.details))

    return Ok(Product(
        id=product_id,
        name=name,
        base_price=price,
        modifier_options=options,
        allows_modifications=_flag(
            _first(raw, "allowsModifications", "allowModifications", "allows_modifications", "allow_modifications"),
            default=True,
        ),
        taxable=_flag(_first(raw, "taxable"), default=True),
    ))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("parse_modifiers", "parse_product")
