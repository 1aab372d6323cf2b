"""Document models for the ``LP_INTRODUCE_GOODS`` registry document.

The registry expects a flat JSON object whose keys are the literal wire names
(mostly snake_case, with the odd camelCase holdover such as ``importRequest``
and ``description.participantInn``).  Models are frozen so a document built
once can be shared across submitting threads, and serialization always emits
fields in declaration order so the same document always produces the same
bytes.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DocumentError

DOC_TYPE_INTRODUCE_GOODS = "LP_INTRODUCE_GOODS"

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    extra="forbid",
)


class Description(BaseModel):
    """Document description block."""

    participant_inn: str = Field(alias="participantInn")

    model_config = _MODEL_CONFIG


class Product(BaseModel):
    """Single product entry introduced into circulation."""

    certificate_document: Optional[str] = None
    certificate_document_date: Optional[date] = None
    certificate_document_number: Optional[str] = None
    owner_inn: str
    producer_inn: str
    production_date: date
    tnved_code: str
    uit_code: Optional[str] = None
    uitu_code: Optional[str] = None

    model_config = _MODEL_CONFIG


class Document(BaseModel):
    """Introduce-goods document as accepted by ``/lk/documents/create``."""

    description: Description
    doc_id: str
    doc_status: str
    doc_type: str = DOC_TYPE_INTRODUCE_GOODS
    import_request: bool = Field(alias="importRequest")
    owner_inn: str
    participant_inn: str
    producer_inn: str
    production_date: date
    production_type: str
    products: Tuple[Product, ...]
    reg_date: Optional[date] = None
    reg_number: Optional[str] = None

    model_config = _MODEL_CONFIG

    def to_json_bytes(self) -> bytes:
        """Serialize to the canonical UTF-8 JSON body sent to the registry."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    def to_wire(self) -> dict:
        """Return the JSON-compatible mapping with wire field names."""
        return self.model_dump(mode="json", by_alias=True)


def load_document(source: Union[str, bytes, Path]) -> Document:
    """Load and validate a document from a JSON file path or JSON text.

    Raises:
        DocumentError: If the file is unreadable or the payload is invalid.
    """
    if isinstance(source, Path):
        try:
            source = source.read_bytes()
        except OSError as exc:
            raise DocumentError(f"Cannot read document {source}: {exc}") from exc
    try:
        return Document.model_validate_json(source)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        )
        raise DocumentError(f"Invalid document: {problems}") from exc


def sample_document() -> Document:
    """Return a filled-in example document, handy for smoke tests and the CLI."""
    return Document(
        description=Description(participant_inn="7700000000"),
        doc_id="sample-doc-0001",
        doc_status="DRAFT",
        import_request=True,
        owner_inn="7700000000",
        participant_inn="7700000000",
        producer_inn="7700000001",
        production_date=date(2020, 1, 23),
        production_type="OWN_PRODUCTION",
        products=(
            Product(
                certificate_document="CONFORMITY_CERTIFICATE",
                certificate_document_date=date(2020, 1, 23),
                certificate_document_number="RU-0001",
                owner_inn="7700000000",
                producer_inn="7700000001",
                production_date=date(2020, 1, 23),
                tnved_code="6401100000",
                uit_code="010460043993125621JgXJ5.T",
            ),
        ),
        reg_date=date(2020, 1, 23),
        reg_number="sample-reg-0001",
    )


def dump_document(document: Document, *, indent: Optional[int] = 2) -> str:
    """Pretty-print a document using wire field names."""
    return json.dumps(document.to_wire(), indent=indent, ensure_ascii=False)


__all__ = [
    "DOC_TYPE_INTRODUCE_GOODS",
    "Description",
    "Document",
    "Product",
    "dump_document",
    "load_document",
    "sample_document",
]
