from models.entities import EntityType, EntitySchema, FieldKind, FieldSpec, SCHEMAS, TAB_ORDER, get_schema
from models.record import Record, Collection
from models.reference import RecordRef, build_reference, extract_record_id

__all__ = [
    "EntityType",
    "EntitySchema",
    "FieldKind",
    "FieldSpec",
    "SCHEMAS",
    "TAB_ORDER",
    "get_schema",
    "Record",
    "Collection",
    "RecordRef",
    "build_reference",
    "extract_record_id",
]
