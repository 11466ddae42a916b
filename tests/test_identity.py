"""Tests for identity issuance and credentials."""

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from anonid.constants import HOLDER_TOKEN_PREFIX, ISSUER_TOKEN_PREFIX
from anonid.exceptions import InvalidIdentityError, InvalidInputError
from anonid.identity import (
    Credential,
    CredentialIssuer,
    Identity,
    extract_attributes,
    is_identity_reference,
)
from anonid.storage import KeyValueIdentityStore, MemoryKeyValueStore


class TestIdentityReference:
    @pytest.mark.parametrize(
        "value",
        ["did:key:abc123", "did:web:example.com", "did:key:legacy-42"],
    )
    def test_valid_references(self, value):
        assert is_identity_reference(value)

    @pytest.mark.parametrize("value", ["", "abc", "did:", "did:key:", "DID:key:x", None, 42])
    def test_invalid_references(self, value):
        assert not is_identity_reference(value)

    def test_issuer_rejects_bad_issuer_id(self):
        with pytest.raises(InvalidIdentityError):
            CredentialIssuer(issuer_id="not-a-did")


class TestIssueIdentity:
    @pytest.mark.asyncio
    async def test_issue_identity(self, identity, clock):
        assert identity.id.startswith("did:key:u")
        assert identity.display_name == "Alice"
        assert len(identity.key_material) == 32
        assert identity.created_at == clock.now
        assert len(identity.credentials) == 1

    @pytest.mark.asyncio
    async def test_initial_credential_covers_attributes(self, identity):
        credential = identity.credentials[0]
        assert credential.subject == identity.id
        assert credential.attributes == {
            "givenName": "Alice",
            "familyName": "Smith",
            "isOver18": True,
        }
        assert credential.type == ["VerifiableCredential", "IdentityCredential"]

    @pytest.mark.asyncio
    async def test_identities_are_unique(self, issuer):
        a = await issuer.issue_identity("A")
        b = await issuer.issue_identity("B")
        assert a.id != b.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   "])
    async def test_blank_name_rejected(self, issuer, name):
        with pytest.raises(InvalidInputError):
            await issuer.issue_identity(name)

    @pytest.mark.asyncio
    async def test_schema_type_checks(self, issuer):
        with pytest.raises(InvalidInputError, match="Date of Birth must be a valid date"):
            await issuer.issue_identity("Bob", {"dateOfBirth": "last tuesday"})

    @pytest.mark.asyncio
    async def test_unknown_attributes_allowed(self, issuer):
        identity = await issuer.issue_identity("Bob", {"favouriteColour": "green"})
        assert identity.credentials[0].attributes == {"favouriteColour": "green"}


class TestIssueCredential:
    @pytest.mark.asyncio
    async def test_credential_is_signed(self, issuer, clock):
        credential = await issuer.issue_credential("did:key:abc", {"email": "a@b.c"})
        assert credential.issuer == issuer.issuer_id
        assert credential.issuance_date == clock.now
        assert credential.proof is not None
        assert credential.proof.signature_token.startswith(ISSUER_TOKEN_PREFIX)
        assert credential.proof.purpose == "assertionMethod"
        assert credential.proof.verification_key_ref == f"{issuer.issuer_id}#keys-1"

    @pytest.mark.asyncio
    async def test_signature_covers_body(self, issuer):
        credential = await issuer.issue_credential("did:key:abc", {"email": "a@b.c"})
        assert credential.proof.signature_token == ISSUER_TOKEN_PREFIX + credential.body_digest()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("subject_id", ["", "alice", "did:key:"])
    async def test_invalid_subject_rejected(self, issuer, subject_id):
        with pytest.raises(InvalidIdentityError):
            await issuer.issue_credential(subject_id, {"email": "a@b.c"})

    @pytest.mark.asyncio
    async def test_id_attribute_cannot_override_subject(self, issuer):
        credential = await issuer.issue_credential(
            "did:key:abc", {"id": "did:key:mallory", "email": "a@b.c"}
        )
        assert credential.subject == "did:key:abc"
        assert credential.attributes == {"email": "a@b.c"}

    @pytest.mark.asyncio
    async def test_type_and_expiration(self, issuer, clock):
        expires = clock.now + timedelta(days=30)
        credential = await issuer.issue_credential(
            "did:key:abc",
            {"email": "a@b.c"},
            credential_type="ContactCredential",
            expiration_date=expires,
        )
        assert credential.type == ["VerifiableCredential", "ContactCredential"]
        assert credential.expiration_date == expires

    @pytest.mark.asyncio
    async def test_empty_attributes_allowed(self, issuer):
        credential = await issuer.issue_credential("did:key:abc")
        assert credential.attributes == {}


class TestAddCredential:
    @pytest.mark.asyncio
    async def test_add_credential_is_copy_on_write(self, issuer, identity, clock):
        clock.advance(minutes=5)
        updated = await issuer.add_credential(identity, {"email": "alice@example.com"})

        assert len(identity.credentials) == 1
        assert len(updated.credentials) == 2
        assert updated.credentials[0] == identity.credentials[0]
        assert updated.credentials[1].attributes == {"email": "alice@example.com"}
        assert updated.last_updated == clock.now
        assert identity.last_updated != updated.last_updated

    @pytest.mark.asyncio
    async def test_records_are_frozen(self, identity):
        with pytest.raises(ValidationError):
            identity.display_name = "Mallory"


class TestExtractAttributes:
    @pytest.mark.asyncio
    async def test_last_credential_wins(self, issuer, identity, clock):
        clock.advance(minutes=1)
        updated = await issuer.add_credential(identity, {"givenName": "Alicia"})
        attributes = issuer.extract_attributes(updated.credentials)
        assert attributes["givenName"] == "Alicia"
        assert attributes["familyName"] == "Smith"

    def test_order_not_issuance_date_decides(self, clock):
        later = Credential(
            issuer="did:key:i",
            issuance_date=clock.now + timedelta(days=1),
            subject_attributes={"id": "did:key:s", "city": "Paris"},
        )
        earlier = Credential(
            issuer="did:key:i",
            issuance_date=clock.now,
            subject_attributes={"id": "did:key:s", "city": "Rome"},
        )
        assert extract_attributes([later, earlier]) == {"city": "Rome"}

    def test_subject_id_excluded(self):
        credential = Credential(
            issuer="did:key:i", subject_attributes={"id": "did:key:s", "email": "x@y.z"}
        )
        assert extract_attributes([credential]) == {"email": "x@y.z"}

    def test_empty(self):
        assert extract_attributes([]) == {}


class TestPresentation:
    @pytest.mark.asyncio
    async def test_full_presentation(self, issuer, identity):
        presentation = await issuer.create_presentation(identity)
        assert presentation.holder == identity.id
        assert presentation.credential_ids == [c.id for c in identity.credentials]
        assert presentation.type == ["VerifiablePresentation"]
        assert presentation.proof.signature_token == (
            HOLDER_TOKEN_PREFIX + presentation.body_digest()
        )
        assert presentation.proof.verification_key_ref == f"{identity.id}#keys-1"

    @pytest.mark.asyncio
    async def test_subset_follows_requested_order(self, issuer, identity):
        updated = await issuer.add_credential(identity, {"email": "alice@example.com"})
        first, second = (c.id for c in updated.credentials)
        presentation = await issuer.create_presentation(
            updated, [second, "urn:uuid:unknown", first, second]
        )
        assert presentation.credential_ids == [second, first]


class TestLegacyIdentity:
    def test_convert_legacy_identity(self, issuer, clock):
        identity = issuer.convert_legacy_identity(
            {"id": "42", "name": "Old Alice", "createdAt": "2020-05-01T10:00:00Z"}
        )
        assert identity.id == "did:key:legacy-42"
        assert identity.display_name == "Old Alice"
        assert identity.created_at.year == 2020
        assert identity.last_updated == clock.now
        assert identity.credentials == []

    def test_missing_fields_rejected(self, issuer):
        with pytest.raises(InvalidInputError):
            issuer.convert_legacy_identity({"id": "42"})


class TestSerialization:
    @pytest.mark.asyncio
    async def test_json_round_trip(self, identity):
        data = identity.to_json_dict()
        assert "displayName" in data
        assert isinstance(data["keyMaterial"], str)
        assert "subjectAttributes" in data["credentials"][0]

        restored = Identity.model_validate(data)
        assert restored == identity
        assert restored.created_at == identity.created_at

    def test_credential_requires_subject(self):
        with pytest.raises(ValueError):
            Credential(issuer="did:key:i", subject_attributes={"email": "x@y.z"})

    def test_duplicate_type_labels_collapse(self):
        credential = Credential(
            issuer="did:key:i",
            type=["VerifiableCredential", "VerifiableCredential", "X"],
            subject_attributes={"id": "did:key:s"},
        )
        assert credential.type == ["VerifiableCredential", "X"]

    @pytest.mark.asyncio
    async def test_date_attribute_survives_storage(self, issuer):
        identity = await issuer.issue_identity("Bob", {"dateOfBirth": date(1990, 1, 1)})
        assert identity.credentials[0].attributes == {"dateOfBirth": "1990-01-01"}

        store = KeyValueIdentityStore(MemoryKeyValueStore())
        await store.save([identity])
        assert await store.load() == [identity]
