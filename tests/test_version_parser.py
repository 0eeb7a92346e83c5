"""Tests for version string classification."""

import pytest
from semantic_version import Version

from common.errors import VersionParseError
from versioning.models import ResolvedVersion, VersionKind
from versioning.parser import (
    is_hash,
    is_rollback_name,
    is_version_name,
    needs_upstream,
    parse_semver,
    parse_version_string,
    semver_from_tag,
)


class TestParseVersionString:
    """Classification of strings that resolve without the network."""

    def test_nightly(self):
        v = parse_version_string("nightly")
        assert v.kind is VersionKind.NIGHTLY
        assert v.tag == "nightly"

    @pytest.mark.parametrize("raw", ["0.9.5", "v0.9.5"])
    def test_semver_with_and_without_prefix(self, raw):
        v = parse_version_string(raw)
        assert v.kind is VersionKind.TAGGED
        assert v.tag == "v0.9.5"
        assert v.raw == raw
        assert v.semver == Version("0.9.5")

    def test_partial_semver_is_coerced(self):
        v = parse_version_string("0.10")
        assert v.tag == "v0.10.0"

    def test_full_hash(self):
        sha = "a" * 40
        v = parse_version_string(sha)
        assert v.kind is VersionKind.HASH
        assert v.tag == sha
        assert v.directory_name == "aaaaaaa"

    def test_five_char_hash_accepted(self):
        v = parse_version_string("abcde")
        assert v.kind is VersionKind.HASH
        assert v.directory_name == "abcde"

    @pytest.mark.parametrize("raw", ["abcd", "a" * 41, "ABCDEF1", "xyz1234"])
    def test_invalid_hashes_rejected(self, raw):
        with pytest.raises(VersionParseError):
            parse_version_string(raw)

    def test_rollback_name(self):
        v = parse_version_string("nightly-0123abc")
        assert v.kind is VersionKind.NIGHTLY_ROLLBACK
        assert v.tag == "nightly-0123abc"

    def test_error_message_mentions_input(self):
        with pytest.raises(VersionParseError) as excinfo:
            parse_version_string("banana")
        assert "Please provide a proper version string" in str(excinfo.value)
        assert "banana" in str(excinfo.value)

    def test_stable_needs_upstream(self):
        with pytest.raises(VersionParseError):
            parse_version_string("stable")

    def test_deterministic(self):
        assert parse_version_string("v0.10.0") == parse_version_string("v0.10.0")

    def test_whitespace_is_stripped(self):
        assert parse_version_string("  nightly\n").tag == "nightly"


class TestHelpers:
    """Small predicates used across commands."""

    def test_is_hash(self):
        assert is_hash("deadbeef")
        assert not is_hash("DEADBEEF")
        assert not is_hash("dead")

    def test_is_rollback_name(self):
        assert is_rollback_name("nightly-abcdef0")
        assert not is_rollback_name("nightly-abcdef")
        assert not is_rollback_name("nightly")

    def test_needs_upstream(self):
        for value in ("stable", "latest", "head", "git", "HEAD"):
            assert needs_upstream(value)
        assert not needs_upstream("nightly")

    def test_parse_semver_rejects_garbage(self):
        assert parse_semver("v1.2.3.4") is None
        assert parse_semver("nightly") is None

    def test_semver_from_tag(self):
        assert semver_from_tag("v0.10.4") == Version("0.10.4")
        assert semver_from_tag("nightly") is None

    def test_is_version_name(self):
        assert is_version_name("v0.9.5")
        assert is_version_name("nightly")
        assert is_version_name("nightly-abcdef0")
        assert is_version_name("abc1234")
        assert not is_version_name("neovim-git")
        assert not is_version_name("nvim-bin")
        assert not is_version_name("env")


class TestResolvedVersion:
    """Model behaviour."""

    def test_str_is_tag(self):
        v = ResolvedVersion(tag="v0.9.5", kind=VersionKind.TAGGED, raw="0.9.5")
        assert str(v) == "v0.9.5"

    def test_directory_name_for_tags(self):
        v = ResolvedVersion(tag="nightly", kind=VersionKind.NIGHTLY, raw="nightly")
        assert v.directory_name == "nightly"
