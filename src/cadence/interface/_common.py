"""Helpers shared by CLI commands."""

from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from cadence.application.config import AppConfig, resolve_config
from cadence.domain.constants import DEFAULT_STAGE, STAGE_ORDER
from cadence.domain.models import SessionCard, ensure_utc, parse_iso, to_iso


def _resolve_with_overrides(**overrides: Any) -> AppConfig:
    """Resolve config, letting non-None CLI values win over file and env settings."""
    return resolve_config({k: v for k, v in overrides.items() if v is not None})


def _coerce_due(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return parse_iso(str(value))


def card_from_mapping(item: dict[str, Any]) -> SessionCard:
    """
    Build a SessionCard from a loosely-shaped mapping.

    Accepts `id` or `card_id`; `stage` defaults to 'learn'. Raises ValueError
    for a missing id, an unknown stage or an unparsable due time.
    """
    card_id = item.get("id", item.get("card_id"))
    if card_id is None:
        raise ValueError(f"Card has no id: {item!r}")

    stage = item.get("stage") or DEFAULT_STAGE
    if stage not in STAGE_ORDER:
        raise ValueError(f"Unknown stage '{stage}' for card {card_id}")

    return SessionCard(
        card_id=str(card_id),
        stage=stage,
        due_at=_coerce_due(item.get("due_at")),
        term=item.get("term"),
        definition=item.get("definition"),
    )


def load_cards(path: Path) -> list[SessionCard]:
    """
    Load session candidates from a YAML or JSON file.

    The document is either a list of cards or a mapping with a `cards` list.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("cards", [])
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of cards")

    cards = []
    for item in data:
        if not isinstance(item, dict):
            raise ValueError(f"{path}: card entries must be mappings, got {item!r}")
        cards.append(card_from_mapping(item))
    return cards


def card_to_dict(card: SessionCard) -> dict[str, Any]:
    d: dict[str, Any] = {
        "id": card.card_id,
        "stage": card.stage,
        "due_at": to_iso(card.due_at) if card.due_at else None,
    }
    if card.term is not None:
        d["term"] = card.term
    if card.definition is not None:
        d["definition"] = card.definition
    return d
