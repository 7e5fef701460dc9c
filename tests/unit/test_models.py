"""Tests for package specs and version records."""

from __future__ import annotations

import pytest

from relpack.core.errors import ConfigurationError, InvalidPackage
from relpack.core.models import PackageSpec, VersionRecord, is_valid_identifier, load_package_spec


class TestPackageSpec:
    def test_from_dict(self):
        spec = PackageSpec.from_dict({"name": "foo", "files": ["lib/**/*"], "dependencies": ["bar"]})
        assert spec.name == "foo"
        assert spec.files == ("lib/**/*",)
        assert spec.dependencies == ("bar",)

    def test_non_list_dependencies_become_empty(self):
        spec = PackageSpec.from_dict({"name": "foo", "files": ["a"], "dependencies": "bar"})
        assert spec.dependencies == ()

    def test_frozen(self):
        spec = PackageSpec(name="foo", files=("a",))
        with pytest.raises(AttributeError):
            spec.name = "bar"  # type: ignore[misc]

    def test_validate_missing_name(self):
        with pytest.raises(ConfigurationError, match="name is missing"):
            PackageSpec(name="  ", files=("a",)).validate()

    def test_validate_invalid_name(self):
        with pytest.raises(ConfigurationError, match="valid identifier"):
            PackageSpec(name="foo bar", files=("a",)).validate()

    def test_validate_no_files(self):
        with pytest.raises(ConfigurationError, match="doesn't include any files"):
            PackageSpec(name="foo", files=()).validate()

    def test_validate_custom_predicate(self):
        with pytest.raises(ConfigurationError):
            PackageSpec(name="foo", files=("a",)).validate(is_valid_name=lambda name: False)

    def test_configuration_error_is_invalid_package(self):
        assert issubclass(ConfigurationError, InvalidPackage)

    def test_non_mapping_rejected(self):
        with pytest.raises(ConfigurationError):
            PackageSpec.from_dict(["name", "foo"])  # type: ignore[arg-type]


class TestIdentifier:
    @pytest.mark.parametrize("name", ["foo", "redis-2.8", "ruby_1.9.3", "a+b"])
    def test_valid(self, name):
        assert is_valid_identifier(name)

    @pytest.mark.parametrize("name", ["", "foo bar", "foo/bar", "ünïcode"])
    def test_invalid(self, name):
        assert not is_valid_identifier(name)


class TestLoadPackageSpec:
    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "spec"
        path.write_text("---\nname: redis\nfiles:\n  - redis/*.tar.gz\ndependencies:\n  - gcc\n")
        spec = load_package_spec(path)
        assert spec == PackageSpec(name="redis", files=("redis/*.tar.gz",), dependencies=("gcc",))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read package spec"):
            load_package_spec(tmp_path / "nope")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "spec"
        path.write_text("name: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Malformed"):
            load_package_spec(path)


class TestVersionRecord:
    def test_dev_record_has_no_blobstore_id_key(self):
        assert VersionRecord(version=1, sha1="abc").to_dict() == {"version": 1, "sha1": "abc"}

    def test_final_record_keys(self):
        record = VersionRecord(version=3, sha1="abc", blobstore_id="blob-1")
        assert record.to_dict() == {"version": 3, "sha1": "abc", "blobstore_id": "blob-1"}

    def test_unknown_keys_preserved(self):
        record = VersionRecord.from_dict({"version": 1, "sha1": "abc", "notes": "rc"})
        assert record.extra == {"notes": "rc"}
        assert record.to_dict()["notes"] == "rc"

    def test_missing_version(self):
        assert VersionRecord.from_dict({"sha1": "abc"}).version is None
