"""Read agreements and agreement templates from YAML or JSON files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from slaguard.models import Agreement, TextType

PathLike = Union[str, Path]


def load_documents(path: PathLike) -> List[Dict[str, Any]]:
    """Return every agreement document in ``path``; a top-level list holds several."""

    with open(path, "r", encoding="utf-8") as handle:
        documents = [doc for doc in yaml.safe_load_all(handle) if doc is not None]

    flattened: List[Dict[str, Any]] = []
    for doc in documents:
        items = doc if isinstance(doc, list) else [doc]
        for item in items:
            if not isinstance(item, dict):
                raise ValueError(f"{path}: expected a mapping, got {type(item).__name__}")
            flattened.append(item)
    return flattened


def parse_agreement(document: Dict[str, Any]) -> Agreement:
    details = document.get("details") or {}
    text_type = details.get("type") or TextType.AGREEMENT.value
    if text_type != TextType.AGREEMENT.value:
        raise ValueError(f"document '{document.get('id', '')}' is a {text_type}, not an agreement")
    return Agreement.from_dict(document)


def read_agreements(path: PathLike) -> List[Agreement]:
    return [parse_agreement(doc) for doc in load_documents(path)]


def read_agreement(path: PathLike) -> Agreement:
    """Read a file holding exactly one agreement."""

    agreements = read_agreements(path)
    if len(agreements) != 1:
        raise ValueError(f"{path}: expected one agreement, found {len(agreements)}")
    return agreements[0]


def read_template(path: PathLike) -> Dict[str, Any]:
    """Read a file holding exactly one template document."""

    documents = load_documents(path)
    if len(documents) != 1:
        raise ValueError(f"{path}: expected one template, found {len(documents)}")
    template = documents[0]
    text_type = (template.get("details") or {}).get("type")
    if text_type != TextType.TEMPLATE.value:
        raise ValueError(f"{path}: document is a {text_type or 'untyped text'}, not a template")
    return template
