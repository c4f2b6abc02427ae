from repoverse.protocol.schema_validation import (
    ENTITY_SCHEMA,
    SCENE_REQUEST_SCHEMA,
    VIEWER_SCHEMA,
    ProtocolValidationError,
    ProtocolValidator,
)

__all__ = [
    "ENTITY_SCHEMA",
    "ProtocolValidationError",
    "ProtocolValidator",
    "SCENE_REQUEST_SCHEMA",
    "VIEWER_SCHEMA",
]
