"""Tests for export filename assignment."""
import re
from datetime import datetime, timezone

import pytest

from photos_export.core.models import MediaKind, Resource, ResourceKind
from photos_export.engines.content_types import ContentTypeLookup
from photos_export.engines.hash_engine import hash64, letter_from_hash
from photos_export.services.naming import (
    NameRegistry,
    assign_filename,
    capture_timestamp,
    filename_for_resource,
    resolve_extension,
    resource_seed,
    sidecar_filename,
)

from .fixtures import CAPTURE, STAMP, make_asset, make_resource


ALPHABET = "abcdefghijklmnopqrstuvwxyz"


class TestCaptureTimestamp:
    """Tests for the 14-digit capture stamp."""

    def test_naive_datetime(self):
        """Test naive datetimes are formatted as local time as-is."""
        assert capture_timestamp(CAPTURE) == STAMP

    def test_aware_datetime_uses_local_zone(self):
        """Test aware datetimes are converted to the local zone."""
        moment = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
        expected = moment.astimezone().strftime("%Y%m%d%H%M%S")
        assert capture_timestamp(moment) == expected

    def test_zero_padding(self):
        assert capture_timestamp(datetime(999, 1, 1, 1, 1, 1)) == "09990101010101"


class TestResolveExtension:
    """Tests for extension resolution."""

    def test_from_original_name_lowercased(self):
        assert resolve_extension("IMG_0001.HEIC", "public.jpeg") == "heic"

    def test_only_last_extension(self):
        assert resolve_extension("archive.tar.GZ", "") == "gz"

    def test_from_content_type(self):
        assert resolve_extension("", "public.jpeg") == "jpeg"

    def test_from_mime_type(self):
        assert resolve_extension("noext", "image/jpeg") == "jpg"

    def test_unknown(self):
        assert resolve_extension("", "com.example.unknown") == ""

    def test_custom_lookup(self):
        lookup = ContentTypeLookup(extra={"com.example.thing": ".thg"})
        assert resolve_extension("", "com.example.thing", lookup) == "thg"


class TestAssignFilename:
    """Tests for the collision-resolving filename algorithm."""

    def test_base_name_when_free(self):
        """Test the first claim takes the bare stamp."""
        registry = NameRegistry()
        name = assign_filename(CAPTURE, "IMG_0001.HEIC", "seed", "public.heic", registry)
        assert name == f"{STAMP}.heic"
        assert name in registry

    def test_no_extension(self):
        """Test names without any resolvable extension have no dot."""
        registry = NameRegistry()
        name = assign_filename(CAPTURE, "", "seed", "com.example.unknown", registry)
        assert name == STAMP

    def test_extension_from_content_type(self):
        registry = NameRegistry()
        name = assign_filename(CAPTURE, "", "seed", "public.jpeg", registry)
        assert name == f"{STAMP}.jpeg"

    def test_collision_uses_hashed_letter(self):
        """Test a taken base name gets the letter derived from the seed."""
        registry = NameRegistry({f"{STAMP}.heic"})
        name = assign_filename(CAPTURE, "IMG_0001.HEIC", "seed", "public.heic", registry)

        letter = letter_from_hash(hash64("IMG_0001.HEIC|seed"), 0)
        assert name == f"{STAMP}{letter}.heic"

    def test_collision_without_original_name_hashes_seed(self):
        registry = NameRegistry({f"{STAMP}.jpeg"})
        name = assign_filename(CAPTURE, "", "seed", "public.jpeg", registry)

        letter = letter_from_hash(hash64("seed"), 0)
        assert name == f"{STAMP}{letter}.jpeg"

    def test_taken_letter_advances_offset(self):
        """Test a taken letter moves to the next offset."""
        h = hash64("IMG.JPG|seed")
        first = letter_from_hash(h, 0)
        registry = NameRegistry({f"{STAMP}.jpg", f"{STAMP}{first}.jpg"})

        name = assign_filename(CAPTURE, "IMG.JPG", "seed", "public.jpeg", registry)

        assert name == f"{STAMP}{letter_from_hash(h, 1)}.jpg"

    def test_exhausted_letters_rehash_with_cycle(self):
        """Test that after all 26 letters the seed is rehashed with ``#1``."""
        taken = {f"{STAMP}.jpg"} | {f"{STAMP}{c}.jpg" for c in ALPHABET}
        registry = NameRegistry(taken)

        name = assign_filename(CAPTURE, "IMG.JPG", "seed", "public.jpeg", registry)

        letter = letter_from_hash(hash64("IMG.JPG|seed#1"), 0)
        assert name == f"{STAMP}{letter}1.jpg"
        assert name not in taken

    def test_many_collisions_terminate(self):
        """Test more collisions than letters still yield unique names."""
        registry = NameRegistry()
        names = [
            assign_filename(CAPTURE, f"IMG_{i}.JPG", f"seed{i}", "public.jpeg", registry)
            for i in range(60)
        ]
        assert len(set(names)) == 60
        assert sum(1 for n in names if re.match(rf"^{STAMP}[a-z]\.jpg$", n)) == 26

    def test_unique_within_registry(self):
        """Test many colliding resources all get distinct names."""
        registry = NameRegistry()
        names = [
            assign_filename(CAPTURE, "IMG.JPG", f"seed-{i}", "public.jpeg", registry)
            for i in range(20)
        ]
        assert len(set(names)) == 20
        pattern = re.compile(rf"^{STAMP}[a-z]?\.jpg$")
        assert all(pattern.match(n) for n in names)

    def test_deterministic_across_runs(self):
        """Test the same inputs in the same order give the same names."""
        def run():
            registry = NameRegistry()
            return [
                assign_filename(CAPTURE, "IMG.JPG", f"seed-{i}", "public.jpeg", registry)
                for i in range(5)
            ]

        assert run() == run()


class TestNameRegistry:
    """Tests for the per-asset registry."""

    def test_claim(self):
        registry = NameRegistry()
        assert registry.claim("a.jpg") is True
        assert registry.claim("a.jpg") is False
        assert len(registry) == 1

    def test_add_and_iterate_sorted(self):
        registry = NameRegistry(["b.jpg"])
        registry.add("a.jpg")
        assert list(registry) == ["a.jpg", "b.jpg"]


class TestResourceNames:
    """Tests for resource and sidecar naming helpers."""

    def test_resource_seed_format(self):
        asset = make_asset(identifier="ABC/L0/001", media_subtypes=8, duration=2.5)
        resource = make_resource("IMG.MOV", ResourceKind.PAIRED_VIDEO, "com.apple.quicktime-movie")

        assert resource_seed(asset, resource) == (
            "asset=ABC/L0/001|mediaType=1|subtypes=8|px=4032x3024|dur=2.5"
            "|resType=9|uti=com.apple.quicktime-movie"
        )

    def test_live_photo_pair(self):
        """Test an image and its paired video both get the bare stamp."""
        asset = make_asset()
        registry = NameRegistry()
        names = [
            filename_for_resource(asset, r, CAPTURE, registry)
            for r in asset.resources
        ]
        assert names == [f"{STAMP}.heic", f"{STAMP}.mov"]

    def test_edited_and_original_collide(self):
        asset = make_asset(resources=(
            make_resource("IMG_0001.JPG", ResourceKind.PHOTO, "public.jpeg"),
            make_resource("IMG_E0001.JPG", ResourceKind.FULL_SIZE_PHOTO, "public.jpeg"),
        ))
        registry = NameRegistry()
        first, second = (
            filename_for_resource(asset, r, CAPTURE, registry) for r in asset.resources
        )

        expected_seed = f"IMG_E0001.JPG|{resource_seed(asset, asset.resources[1])}"
        assert first == f"{STAMP}.jpg"
        assert second == f"{STAMP}{letter_from_hash(hash64(expected_seed), 0)}.jpg"

    def test_sidecar_name(self):
        asset = make_asset()
        registry = NameRegistry()
        assert sidecar_filename(asset, CAPTURE, registry) == f"{STAMP}.json"

    def test_sidecar_avoids_resource_json(self):
        """Test the sidecar never reuses a name a resource already took."""
        asset = make_asset(resources=(
            Resource(kind=ResourceKind.ADJUSTMENT_DATA, original_filename="Adjustments.json",
                     content_type="public.json"),
        ))
        registry = NameRegistry()
        resource_name = filename_for_resource(asset, asset.resources[0], CAPTURE, registry)
        sidecar = sidecar_filename(asset, CAPTURE, registry)

        assert resource_name == f"{STAMP}.json"
        assert sidecar != resource_name
        assert re.match(rf"^{STAMP}[a-z]\.json$", sidecar)

    @pytest.mark.parametrize("kind", [MediaKind.IMAGE, MediaKind.VIDEO])
    def test_seed_depends_on_media_kind(self, kind):
        resource = make_resource()
        seed = resource_seed(make_asset(media_kind=kind), resource)
        assert f"mediaType={int(kind)}" in seed
