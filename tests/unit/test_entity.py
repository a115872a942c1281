"""
Unit tests for entity base types.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

import bson
import pytest
from bson.binary import UuidRepresentation
from bson.codec_options import CodecOptions

from mdb_wrapper.repositories.base import (
    NIL_ID,
    Entity,
    KeyValueEntity,
    is_default_id,
    is_null_or_deleted,
    not_deleted_filter,
)


@dataclass
class Location:
    lat: float = 0.0
    lon: float = 0.0


@dataclass
class Venue(Entity):
    name: str
    location: Location = field(default_factory=Location)
    stops: list[Location] = field(default_factory=list)


class TestEntityMapping:
    """Test conversion between entities and documents."""

    def test_to_dict_maps_id(self):
        venue_id = uuid.uuid4()
        added = datetime(2024, 5, 1, tzinfo=timezone.utc)
        venue = Venue(name="Hall", id=venue_id, added=added, location=Location(1.5, 2.5))

        assert venue.to_dict() == {
            "_id": venue_id,
            "added": added,
            "deleted": False,
            "name": "Hall",
            "location": {"lat": 1.5, "lon": 2.5},
            "stops": [],
        }

    def test_from_dict_ignores_unknown_fields(self):
        venue_id = uuid.uuid4()

        venue = Venue.from_dict({"_id": venue_id, "name": "Hall", "legacy": 1, "deleted": True})

        assert venue.id == venue_id
        assert venue.name == "Hall"
        assert venue.deleted is True
        assert venue.added is None

    def test_from_dict_does_not_mutate_document(self):
        document = {"_id": uuid.uuid4(), "name": "Hall"}

        Venue.from_dict(document)

        assert "_id" in document

    def test_from_dict_rebuilds_nested_types(self):
        venue = Venue.from_dict(
            {
                "_id": uuid.uuid4(),
                "name": "Hall",
                "location": {"lat": 1.5, "lon": 2.5},
                "stops": [{"lat": 1.0, "lon": 2.0}],
            }
        )

        assert isinstance(venue.location, Location)
        assert venue.location == Location(1.5, 2.5)
        assert venue.stops == [Location(1.0, 2.0)]

    def test_to_dict_is_bson_encodable(self):
        venue = Venue(
            name="Hall",
            id=uuid.uuid4(),
            added=datetime(2024, 5, 1, tzinfo=timezone.utc),
            stops=[Location(1.0, 2.0), Location(3.0, 4.0)],
        )
        options = CodecOptions(uuid_representation=UuidRepresentation.STANDARD)

        encoded = bson.encode(venue.to_dict(), codec_options=options)

        assert bson.decode(encoded, codec_options=options)["stops"][1] == {"lat": 3.0, "lon": 4.0}

    @pytest.mark.asyncio
    async def test_nested_fields_survive_storage(self, db):
        venue = Venue(name="Hall", location=Location(1.5, 2.5), stops=[Location(1.0, 2.0)])
        venue_id = await db.add(venue)

        found = await db.get(Venue, venue_id)

        assert isinstance(found.location, Location)
        assert found.stops == [Location(1.0, 2.0)]
        assert found == venue

    def test_from_dict_none(self):
        assert Venue.from_dict(None) is None

    def test_collection_name(self):
        assert Venue.collection_name() == "Venue"


class TestHelpers:
    """Test entity helper functions."""

    def test_is_default_id(self):
        assert is_default_id(None) is True
        assert is_default_id(NIL_ID) is True
        assert is_default_id(uuid.uuid4()) is False

    def test_is_null_or_deleted(self):
        assert is_null_or_deleted(None) is True
        assert is_null_or_deleted(Venue(name="Hall", deleted=True)) is True
        assert is_null_or_deleted(Venue(name="Hall")) is False

    def test_not_deleted_filter(self):
        assert not_deleted_filter() == {"deleted": {"$ne": True}}

    def test_key_value_entity(self):
        record = KeyValueEntity(key="k", value="1")

        assert record.to_dict() == {"key": "k", "value": "1"}
        assert KeyValueEntity.from_dict({"_id": 1, "key": "k", "value": "1"}) == record
        assert KeyValueEntity.from_dict(None) is None
