"""
Tests for release asset selection: the variant table, default
preferences, and manifest resolution with the CPU fallback.
"""

import pytest

from conftest import RELEASE_TAG, make_manifest
from remembrances_installer.core.models import (
    Arch,
    CapabilityProfile,
    OSFamily,
    PlatformTuple,
    ReleaseManifest,
    ReleaseVariant,
    VariantPreference,
)
from remembrances_installer.core.services.install.domain.asset_selection import (
    default_preference,
    resolve_asset,
    select_filename,
    select_variant,
)


class TestSelectVariant:
    @pytest.mark.parametrize("nvidia,portable,expected", [
        (True, True, "remembrances-mcp-embedded-cuda-portable-linux-x86_64.zip"),
        (True, False, "remembrances-mcp-embedded-cuda-linux-x86_64.zip"),
        (False, True, "remembrances-mcp-embedded-cpu-linux-x86_64.zip"),
        (False, False, "remembrances-mcp-embedded-cpu-linux-x86_64.zip"),
    ])
    def test_linux_table(self, linux_amd64, nvidia, portable, expected):
        pref = VariantPreference(want_nvidia=nvidia, want_portable=portable)
        assert select_filename(linux_amd64, pref) == expected

    def test_darwin_ignores_preference(self, darwin_arm64):
        for nvidia in (True, False):
            for portable in (True, False):
                pref = VariantPreference(want_nvidia=nvidia, want_portable=portable)
                assert select_variant(darwin_arm64, pref) is ReleaseVariant.DARWIN_EMBEDDED
        assert (
            select_filename(darwin_arm64, VariantPreference())
            == "remembrances-mcp-darwin-aarch64-embedded.zip"
        )

    def test_no_mapping(self):
        plat = PlatformTuple(os=OSFamily.LINUX, arch=Arch.AARCH64)
        assert select_variant(plat, VariantPreference()) is None
        assert select_filename(plat, VariantPreference()) is None

    def test_custom_app_name(self, linux_amd64):
        assert select_filename(linux_amd64, VariantPreference(), app="x") == (
            "x-embedded-cpu-linux-x86_64.zip"
        )


class TestDefaultPreference:
    def test_gpu_without_avx512_is_portable(self, linux_amd64):
        profile = CapabilityProfile(has_nvidia_gpu=True, has_avx2=True)
        pref = default_preference(linux_amd64, profile)
        assert pref == VariantPreference(want_nvidia=True, want_portable=True)

    def test_avx512_is_not_portable(self, linux_amd64):
        profile = CapabilityProfile(has_nvidia_gpu=True, has_avx2=True, has_avx512=True)
        assert default_preference(linux_amd64, profile).want_portable is False

    def test_no_gpu_defaults_to_cpu(self, linux_amd64):
        pref = default_preference(linux_amd64, CapabilityProfile())
        assert pref.want_nvidia is False

    def test_darwin_all_false(self, darwin_arm64):
        profile = CapabilityProfile(has_nvidia_gpu=True, has_avx512=True)
        assert default_preference(darwin_arm64, profile) == VariantPreference()


class TestResolveAsset:
    def test_primary_found(self, full_manifest):
        res = resolve_asset(full_manifest, ReleaseVariant.LINUX_CUDA_EMBEDDED)
        assert res.found
        assert res.fell_back is False
        assert res.filename == "remembrances-mcp-embedded-cuda-linux-x86_64.zip"
        assert res.asset.download_url.endswith(res.filename)

    def test_cpu_falls_back_to_plain_build(self):
        manifest = make_manifest(ReleaseVariant.LINUX_CPU)
        res = resolve_asset(manifest, ReleaseVariant.LINUX_CPU_EMBEDDED)
        assert res.found
        assert res.fell_back is True
        assert res.requested_filename == "remembrances-mcp-embedded-cpu-linux-x86_64.zip"
        assert res.filename == "remembrances-mcp-cpu-linux-x86_64.zip"

    def test_fallback_missing_too(self):
        manifest = make_manifest(ReleaseVariant.DARWIN_EMBEDDED)
        res = resolve_asset(manifest, ReleaseVariant.LINUX_CPU_EMBEDDED)
        assert not res.found
        assert res.fell_back is True

    def test_cuda_has_no_fallback(self):
        manifest = make_manifest(ReleaseVariant.LINUX_CPU_EMBEDDED, ReleaseVariant.LINUX_CPU)
        res = resolve_asset(manifest, ReleaseVariant.LINUX_CUDA_PORTABLE_EMBEDDED)
        assert not res.found
        assert res.fell_back is False
        assert res.filename == "remembrances-mcp-embedded-cuda-portable-linux-x86_64.zip"

    def test_empty_manifest(self):
        res = resolve_asset(ReleaseManifest(tag=RELEASE_TAG), ReleaseVariant.DARWIN_EMBEDDED)
        assert not res.found


class TestReleaseManifest:
    def test_from_github_payload(self):
        data = {
            "tag_name": "v1.2.3",
            "assets": [
                {
                    "name": "remembrances-mcp-embedded-cpu-linux-x86_64.zip",
                    "browser_download_url": "https://github.com/x/y/a.zip",
                    "size": 42,
                },
                {"name": "no-url.zip"},
            ],
        }
        manifest = ReleaseManifest.from_github(data)
        assert manifest.tag == "v1.2.3"
        assert len(manifest.assets) == 1
        assert manifest.assets[0].size_bytes == 42
        assert manifest.embedded_assets() == ["remembrances-mcp-embedded-cpu-linux-x86_64.zip"]

    def test_missing_tag(self):
        assert ReleaseManifest.from_github({}).tag == ""

    def test_cuda_variants(self):
        assert ReleaseVariant.LINUX_CUDA_EMBEDDED.is_cuda
        assert ReleaseVariant.LINUX_CUDA_PORTABLE_EMBEDDED.is_cuda
        assert not ReleaseVariant.LINUX_CPU_EMBEDDED.is_cuda
        assert not ReleaseVariant.DARWIN_EMBEDDED.is_cuda
