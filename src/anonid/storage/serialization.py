# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""JSON encoding of identity lists shared by the storage backends."""

import json
from typing import Sequence

from pydantic import TypeAdapter, ValidationError

from anonid.exceptions import CorruptStorageError
from anonid.identity.models import Identity

_IDENTITY_LIST = TypeAdapter(list[Identity])


def dump_identities(identities: Sequence[Identity]) -> str:
    """Encode identities as a JSON array of camelCase records."""
    return json.dumps([identity.to_json_dict() for identity in identities])


def load_identities(payload: str) -> list[Identity]:
    """Decode a JSON array written by :func:`dump_identities`.

    Raises:
        CorruptStorageError: If the payload is not a valid identity array.
    """
    try:
        return _IDENTITY_LIST.validate_json(payload)
    except ValidationError as e:
        raise CorruptStorageError(f"Stored identities are malformed: {e}") from e


def dump_identity(identity: Identity) -> str:
    return json.dumps(identity.to_json_dict())


def load_identity(payload: str) -> Identity:
    try:
        return Identity.model_validate_json(payload)
    except ValidationError as e:
        raise CorruptStorageError(f"Stored identity is malformed: {e}") from e
