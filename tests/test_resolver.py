"""Tests for upstream-aware version resolution."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from semantic_version import Version

from common.errors import UpstreamError
from versioning.models import UpstreamRelease, VersionKind
from versioning.resolver import resolve_version


def _client(stable_tag="v0.10.4", latest_sha="f" * 40):
    client = MagicMock()
    client.get_upstream_stable = AsyncMock(
        return_value=UpstreamRelease(tag_name=stable_tag, published_at="2024-05-01T10:00:00Z")
    )
    client.get_latest_commit = AsyncMock(return_value=latest_sha)
    return client


class TestResolveVersion:
    """resolve_version consults upstream only for aliases."""

    @pytest.mark.parametrize("alias", ["stable", "latest"])
    def test_stable_aliases(self, alias):
        client = _client()
        v = asyncio.run(resolve_version(alias, client))
        assert v.kind is VersionKind.STABLE
        assert v.tag == "v0.10.4"
        assert v.semver == Version("0.10.4")
        assert v.raw == alias
        client.get_upstream_stable.assert_awaited_once()

    def test_stable_with_unexpected_tag(self):
        client = _client(stable_tag="nightly")
        with pytest.raises(UpstreamError):
            asyncio.run(resolve_version("stable", client))

    @pytest.mark.parametrize("alias", ["head", "git", "HEAD"])
    def test_head_aliases_resolve_to_latest_commit(self, alias):
        client = _client(latest_sha="1234567890abcdef1234567890abcdef12345678")
        v = asyncio.run(resolve_version(alias, client))
        assert v.kind is VersionKind.HASH
        assert v.tag == "1234567890abcdef1234567890abcdef12345678"
        assert v.directory_name == "1234567"

    def test_plain_versions_do_not_touch_network(self):
        client = _client()
        v = asyncio.run(resolve_version("v0.9.5", client))
        assert v.kind is VersionKind.TAGGED
        client.get_upstream_stable.assert_not_awaited()
        client.get_latest_commit.assert_not_awaited()
