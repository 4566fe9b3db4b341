from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from jsonschema import Draft202012Validator
from referencing import Registry, Resource

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

SCHEMAS = {
    "units": "units-v1.schema.json",
    "report": "report-v1.schema.json",
    "error": "error-v1.schema.json",
}


class SchemaError(Exception):
    pass


def _load(name: str) -> Dict[str, Any]:
    return json.loads((SCHEMA_DIR / name).read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def _registry() -> Registry:
    return Registry().with_resources(
        [(f"utf8string:{stem.split('.')[0]}", Resource.from_contents(_load(stem))) for stem in SCHEMAS.values()]
    )


@lru_cache(maxsize=None)
def validator_for(which: str) -> Draft202012Validator:
    if which not in SCHEMAS:
        raise KeyError(f"unknown schema: {which}")
    return Draft202012Validator(_load(SCHEMAS[which]), registry=_registry())


def validate_or_raise(obj: Any, *, which: str) -> None:
    v = validator_for(which)
    errs = sorted(v.iter_errors(obj), key=lambda e: [str(p) for p in e.path])
    if errs:
        msg = "; ".join([f"{list(e.path)}: {e.message}" for e in errs[:5]])
        raise SchemaError(msg)
