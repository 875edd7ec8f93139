"""
StacNormalizer tests.

Drop rules (parse, version), pass-through of unexpected shapes, timestamp precedence, self-link
repair, asset href resolution, and the @source/@ingested stamps.
"""

import json

import pytest

from core.models import DropReason
from services.stac_normalizer import StacNormalizer, containing_directory
from tests.factories.fakes import InMemoryDocumentStore
from tests.factories.stac_factories import (
    FIXED_NOW,
    as_bytes,
    make_stac_collection,
    make_stac_item,
    random_key,
    random_timestamp,
)


class TestContainingDirectory:

    @pytest.mark.parametrize("key, expected", [
        ("a/b/item.json", "a/b"),
        ("a/1.json", "a"),
        ("item.json", ""),
        ("abfs://container/imagery/item.json", "abfs://container/imagery"),
    ])
    def test_final_segment_removed(self, key, expected):
        assert containing_directory(key) == expected


class TestDropRules:

    def test_missing_version_is_absent(self, normalizer, stac_item):
        del stac_item["stac_version"]
        result = normalizer.normalize(as_bytes(stac_item), random_key())
        assert result.document is None
        assert result.drop_reason == DropReason.MISSING_VERSION

    def test_null_version_is_absent(self, normalizer, stac_item):
        stac_item["stac_version"] = None
        result = normalizer.normalize(as_bytes(stac_item), random_key())
        assert result.drop_reason == DropReason.MISSING_VERSION

    @pytest.mark.parametrize("raw", [b"{not json", b"", b"\xff\xfe\x00"])
    def test_unparsable_bytes_are_absent(self, normalizer, raw):
        result = normalizer.normalize(raw, random_key())
        assert result.document is None
        assert result.drop_reason == DropReason.PARSE_FAILED

    @pytest.mark.parametrize("raw", [b"[]", b"42", b'"stac"', b"null"])
    def test_non_object_json_is_absent(self, normalizer, raw):
        result = normalizer.normalize(raw, random_key())
        assert result.drop_reason == DropReason.PARSE_FAILED

    def test_dropped_result_carries_diagnostic(self, normalizer):
        result = normalizer.normalize(b"{", "a/broken.json")
        assert result.key == "a/broken.json"
        assert result.warnings


class TestPassThrough:
    """Fields the normalizer does not rewrite are kept whatever their type."""

    @pytest.mark.parametrize("field, value", [
        ("id", 123),
        ("stac_version", 1.0),
        ("type", ["Feature"]),
        ("properties", "not-an-object"),
        ("summaries", [1, 2]),
    ])
    def test_unexpected_field_types_kept(self, normalizer, stac_item, field, value):
        stac_item[field] = value
        result = normalizer.normalize(as_bytes(stac_item), random_key())
        assert result.drop_reason is None
        assert result.document.to_index_body()[field] == value

    def test_non_string_asset_roles_kept(self, normalizer):
        asset = {"href": "img.tif", "roles": ["data", 7]}
        item = make_stac_item(assets={"visual": asset})
        result = normalizer.normalize(as_bytes(item), "a/1.json")
        assert result.document.to_index_body()["assets"]["visual"] == {"href": "a/img.tif", "roles": ["data", 7]}

    def test_null_href_on_other_link_kept(self, normalizer, stac_item):
        license_link = {"rel": "license", "href": None}
        stac_item["links"].insert(0, license_link)
        key = random_key()
        result = normalizer.normalize(as_bytes(stac_item), key)
        links = result.document.to_index_body()["links"]
        assert links[0] == license_link
        assert links[1]["href"] == key

    def test_link_without_href_kept(self, normalizer, stac_item):
        stac_item["links"].append({"rel": "parent"})
        result = normalizer.normalize(as_bytes(stac_item), random_key())
        assert result.document.to_index_body()["links"][-1] == {"rel": "parent"}

    def test_links_not_a_list_kept_with_warning(self, normalizer, stac_item):
        stac_item["links"] = {"rel": "self"}
        result = normalizer.normalize(as_bytes(stac_item), random_key())
        assert result.document.to_index_body()["links"] == {"rel": "self"}
        assert any("found 0" in warning for warning in result.warnings)

    def test_self_link_with_null_href_rewritten(self, normalizer, stac_item):
        stac_item["links"] = [{"rel": "self", "href": None}]
        key = random_key()
        result = normalizer.normalize(as_bytes(stac_item), key)
        assert result.document.self_links()[0]["href"] == key

    def test_asset_with_non_string_href_left_alone(self, normalizer):
        item = make_stac_item(assets={"visual": {"href": 42}, "meta": "meta.xml"})
        result = normalizer.normalize(as_bytes(item), "a/1.json")
        body = result.document.to_index_body()
        assert body["assets"] == {"visual": {"href": 42}, "meta": "meta.xml"}
        assert any("visual" in warning for warning in result.warnings)
        assert "assets.visual.href" not in result.repairs


class TestTimestampDerivation:

    def test_summary_date_wins_over_properties(self, normalizer):
        date = random_timestamp()
        collection = make_stac_collection(
            generated=[{"date": date, "datetime": random_timestamp()}],
            properties={"datetime": random_timestamp()},
        )
        result = normalizer.normalize(as_bytes(collection), random_key())
        assert result.document.generated_timestamp == date

    def test_summary_datetime_used_without_date(self, normalizer):
        value = random_timestamp()
        collection = make_stac_collection(
            generated=[{"datetime": value}],
            properties={"datetime": random_timestamp()},
        )
        result = normalizer.normalize(as_bytes(collection), random_key())
        assert result.document.generated_timestamp == value

    def test_only_first_summary_entry_is_read(self, normalizer):
        first = random_timestamp()
        collection = make_stac_collection(generated=[{"date": first}, {"date": random_timestamp()}])
        result = normalizer.normalize(as_bytes(collection), random_key())
        assert result.document.generated_timestamp == first

    def test_empty_summary_entry_does_not_fall_back_to_properties(self, normalizer):
        collection = make_stac_collection(
            generated=[{"package": "catalog-generator"}],
            properties={"datetime": random_timestamp()},
        )
        result = normalizer.normalize(as_bytes(collection), random_key())
        assert result.document is not None
        assert result.document.generated_timestamp is None
        assert result.warnings

    def test_properties_datetime_used_without_summary(self, normalizer):
        value = random_timestamp()
        item = make_stac_item(datetime_value=value)
        result = normalizer.normalize(as_bytes(item), random_key())
        assert result.document.generated_timestamp == value

    def test_null_properties_datetime_keeps_document_with_warning(self, normalizer, stac_item):
        stac_item["properties"]["datetime"] = None
        result = normalizer.normalize(as_bytes(stac_item), random_key())
        assert result.document is not None
        assert result.document.generated_timestamp is None
        assert any("timestamp" in warning.lower() for warning in result.warnings)

    def test_no_source_leaves_timestamp_out_of_body(self, normalizer, stac_item):
        del stac_item["properties"]
        result = normalizer.normalize(as_bytes(stac_item), random_key())
        assert result.document is not None
        assert "@timestamp" not in result.document.to_index_body()

    def test_empty_summary_list_falls_to_properties(self, normalizer):
        value = random_timestamp()
        collection = make_stac_collection(generated=[], properties={"datetime": value})
        result = normalizer.normalize(as_bytes(collection), random_key())
        assert result.document.generated_timestamp == value


class TestSelfLink:

    def test_differing_self_link_rewritten(self, normalizer):
        key = random_key()
        parent = {"rel": "parent", "href": "../collection.json", "title": "Parent"}
        root = {"rel": "root", "href": "../../catalog.json"}
        item = make_stac_item(self_href="./somewhere-else.json", extra_links=[parent])
        item["links"].append(root)

        result = normalizer.normalize(as_bytes(item), key)

        links = result.document.to_index_body()["links"]
        assert [link["rel"] for link in links] == ["parent", "self", "root"]
        assert links[0] == parent
        assert links[2] == root
        assert links[1]["href"] == key
        assert links[1]["type"] == "application/json"
        assert "self_link" in result.repairs

    def test_matching_self_link_left_alone(self, normalizer):
        key = random_key()
        item = make_stac_item(self_href=key)
        result = normalizer.normalize(as_bytes(item), key)
        assert result.document.self_links()[0]["href"] == key
        assert "self_link" not in result.repairs

    def test_missing_self_link_warns_without_correction(self, normalizer, stac_item):
        stac_item["links"] = [{"rel": "parent", "href": "../collection.json"}]
        result = normalizer.normalize(as_bytes(stac_item), random_key())
        assert result.document is not None
        assert result.document.to_index_body()["links"] == stac_item["links"]
        assert any("self link" in warning for warning in result.warnings)

    def test_multiple_self_links_warn_without_correction(self, normalizer, stac_item):
        stac_item["links"].append({"rel": "self", "href": "./other.json"})
        result = normalizer.normalize(as_bytes(stac_item), random_key())
        hrefs = [link["href"] for link in result.document.self_links()]
        assert hrefs == [stac_item["links"][0]["href"], "./other.json"]
        assert any("found 2" in warning for warning in result.warnings)


class TestAssetHrefs:

    def test_relative_href_joined_to_containing_directory(self, normalizer):
        item = make_stac_item(assets={"visual": {"href": "./data.tif"}})
        result = normalizer.normalize(as_bytes(item), "a/b/item.json")
        assert result.document.assets["visual"]["href"] == "a/b/data.tif"

    def test_parent_reference_collapsed(self, normalizer):
        item = make_stac_item(assets={"thumb": {"href": "../thumbs/item.png"}})
        result = normalizer.normalize(as_bytes(item), "a/b/item.json")
        assert result.document.assets["thumb"]["href"] == "a/thumbs/item.png"

    def test_https_href_unchanged(self, normalizer):
        href = "https://example.com/data/scene.tif"
        item = make_stac_item(assets={"visual": {"href": href}})
        result = normalizer.normalize(as_bytes(item), random_key())
        assert result.document.assets["visual"]["href"] == href

    def test_storage_scheme_href_unchanged(self):
        store = InMemoryDocumentStore(scheme_prefix="abfs://")
        normalizer = StacNormalizer(store, clock=lambda: FIXED_NOW)
        href = "abfs://other-container/scene.tif"
        item = make_stac_item(assets={"visual": {"href": href}, "meta": {"href": "meta.xml"}})

        result = normalizer.normalize(as_bytes(item), "abfs://catalog/imagery/item.json")

        assert result.document.assets["visual"]["href"] == href
        assert result.document.assets["meta"]["href"] == "abfs://catalog/imagery/meta.xml"

    def test_key_without_directory(self, normalizer):
        item = make_stac_item(assets={"visual": {"href": "img.tif"}})
        result = normalizer.normalize(as_bytes(item), "item.json")
        assert result.document.assets["visual"]["href"] == "img.tif"

    def test_asset_extras_preserved(self, normalizer):
        asset = {"href": "img.tif", "type": "image/tiff", "roles": ["data"], "eo:bands": [{"name": "red"}]}
        item = make_stac_item(assets={"visual": asset})
        body = normalizer.normalize(as_bytes(item), "a/1.json").document.to_index_body()
        assert body["assets"]["visual"] == dict(asset, href="a/img.tif")

    @pytest.mark.parametrize("href", ["/mnt/shared/scene.tif", "s3://bucket/scene.tif"])
    def test_already_absolute_href_not_counted_as_repair(self, normalizer, href):
        item = make_stac_item(assets={"visual": {"href": href}})
        result = normalizer.normalize(as_bytes(item), "a/b/item.json")
        assert result.document.assets["visual"]["href"] == href
        assert "assets.visual.href" not in result.repairs

    def test_rewritten_href_counted_as_repair(self, normalizer):
        item = make_stac_item(assets={"visual": {"href": "img.tif"}})
        result = normalizer.normalize(as_bytes(item), "a/b/item.json")
        assert "assets.visual.href" in result.repairs


class TestStamps:

    def test_source_and_ingested_stamped(self, normalizer, stac_item):
        key = random_key()
        body = normalizer.normalize(as_bytes(stac_item), key).document.to_index_body()
        assert body["@source"] == key
        assert body["@ingested"] == FIXED_NOW.isoformat()

    def test_unknown_fields_pass_through(self, normalizer, stac_item):
        stac_item["stac_extensions"] = ["https://stac-extensions.github.io/eo/v1.1.0/schema.json"]
        body = normalizer.normalize(as_bytes(stac_item), random_key()).document.to_index_body()
        assert body["bbox"] == stac_item["bbox"]
        assert body["geometry"] == stac_item["geometry"]
        assert body["stac_extensions"] == stac_item["stac_extensions"]
        assert body["properties"]["gsd"] == stac_item["properties"]["gsd"]

    def test_body_is_json_serializable(self, normalizer, stac_collection):
        body = normalizer.normalize(as_bytes(stac_collection), random_key()).document.to_index_body()
        assert json.loads(json.dumps(body))["@source"] == body["@source"]


def test_end_to_end_example(normalizer):
    item = {
        "stac_version": "1.0.0",
        "id": "1",
        "properties": {"datetime": "2020-01-01T00:00:00Z"},
        "links": [{"rel": "self", "href": "a/old.json"}],
        "assets": {"image": {"href": "img.tif"}},
    }

    result = normalizer.normalize(as_bytes(item), "a/1.json")

    document = result.document
    assert document.self_links()[0]["href"] == "a/1.json"
    assert document.assets["image"]["href"] == "a/img.tif"
    assert document.generated_timestamp == "2020-01-01T00:00:00Z"
    assert document.to_index_body()["@timestamp"] == "2020-01-01T00:00:00Z"
