"""
End-to-end install runs with the network and system probes patched.

The release archive is a real zip built in the temp dir, so download →
extract → install → config → shell setup all run for real against a
fake home directory.
"""

import http.client
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import make_manifest
from remembrances_installer.core.errors import (
    AssetNotFoundError,
    DownloadError,
    RemediationError,
    UnsupportedPlatformError,
)
from remembrances_installer.core.models import (
    CapabilityProfile,
    InstallerSettings,
    ReleaseVariant,
    ValidationOutcome,
)
from remembrances_installer.core.services.install.execution.cuda_runtime import (
    RemediationResult,
)
from remembrances_installer.core.services.install.orchestration import orchestrator
from remembrances_installer.core.services.install.orchestration.orchestrator import (
    TOTAL_STEPS,
    describe_host,
    run_install,
)

ORCH = "remembrances_installer.core.services.install.orchestration.orchestrator"

GPU = CapabilityProfile(has_nvidia_gpu=True, cuda_major_version=12, has_avx2=True)
NO_GPU = CapabilityProfile(has_avx2=True)


def _fake_download(url: str, dest: Path, *, timeout: int = 60) -> Path:
    """Write a release zip at ``dest`` instead of fetching ``url``."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(dest, "w") as zf:
        zf.writestr("remembrances-mcp-v1.17.0/remembrances-mcp", "#!/bin/sh\n")
        zf.writestr("remembrances-mcp-v1.17.0/libllama.so", "ELF")
        zf.writestr("remembrances-mcp-v1.17.0/config.sample.gguf.yaml", "x: 1\n")
    return dest


class Answers:
    """Interactive prompter with fixed answers."""

    interactive = True

    def __init__(self, **answers: bool):
        self.answers = answers
        self.asked: list[str] = []

    def ask_yes_no(self, question: str, default: bool) -> bool:
        self.asked.append(question)
        for key, value in self.answers.items():
            if key in question.lower():
                return value
        return default


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("SHELL", "/bin/bash")
    monkeypatch.chdir(tmp_path)
    return home


@pytest.fixture
def no_model():
    return InstallerSettings(download_model="no")


class TestDryRun:
    def test_darwin_selects_embedded_build(self, home, no_model):
        manifest = make_manifest(*ReleaseVariant)
        with patch(f"{ORCH}.download_file") as dl:
            result = run_install(
                no_model, home=home, dry_run=True,
                system="Darwin", machine="arm64", manifest=manifest,
            )
            dl.assert_not_called()
        assert result.dry_run
        assert result.resolution.filename == "remembrances-mcp-darwin-aarch64-embedded.zip"
        assert result.profile == CapabilityProfile.unknown()

    def test_linux_gpu_defaults_to_portable_cuda(self, home, no_model):
        manifest = make_manifest(*ReleaseVariant)
        with patch(f"{ORCH}.probe", return_value=GPU):
            result = run_install(
                no_model, home=home, dry_run=True,
                system="Linux", machine="x86_64", manifest=manifest,
            )
        assert result.resolution.filename == (
            "remembrances-mcp-embedded-cuda-portable-linux-x86_64.zip"
        )

    def test_fetches_manifest_when_not_given(self, home, no_model):
        manifest = make_manifest(ReleaseVariant.LINUX_CPU_EMBEDDED)
        with patch(f"{ORCH}.fetch_release_manifest", return_value=manifest) as fetch, \
             patch(f"{ORCH}.probe", return_value=NO_GPU):
            result = run_install(
                no_model, home=home, dry_run=True, system="Linux", machine="x86_64",
            )
        fetch.assert_called_once_with("madeindigio/remembrances-mcp", "latest", timeout=60)
        assert result.release_tag == manifest.tag
        assert result.embedded_assets == ["remembrances-mcp-embedded-cpu-linux-x86_64.zip"]

    def test_progress_reported(self, home, no_model):
        seen: list[tuple[int, str]] = []
        with patch(f"{ORCH}.probe", return_value=NO_GPU):
            run_install(
                no_model, home=home, dry_run=True, system="Linux", machine="x86_64",
                manifest=make_manifest(*ReleaseVariant),
                progress=lambda pct, label: seen.append((pct, label)),
            )
        assert [label for _, label in seen] == [
            "Detecting platform",
            "Fetching release metadata",
            "Detecting CPU/GPU capabilities",
            "Choosing build",
            "Preparing install directories",
        ]
        assert seen[0][0] == 100 // TOTAL_STEPS


class TestFatalErrors:
    def test_unsupported_platform_before_network(self, home, no_model):
        with patch(f"{ORCH}.fetch_release_manifest") as fetch:
            with pytest.raises(UnsupportedPlatformError):
                run_install(no_model, home=home, system="Darwin", machine="x86_64")
            fetch.assert_not_called()

    def test_metadata_failure(self, home, no_model):
        with patch(f"{ORCH}.fetch_release_manifest", side_effect=DownloadError("HTTP 404")):
            with pytest.raises(DownloadError):
                run_install(no_model, home=home, system="Linux", machine="x86_64")

    def test_missing_cuda_asset(self, home, no_model):
        manifest = make_manifest(ReleaseVariant.LINUX_CPU_EMBEDDED)
        with patch(f"{ORCH}.probe", return_value=GPU):
            with pytest.raises(AssetNotFoundError, match="embedded-cuda-portable"):
                run_install(
                    no_model, home=home, system="Linux", machine="x86_64", manifest=manifest,
                )


class TestFullRun:
    def _run(self, settings, home, profile, validation=None, **kw):
        with patch(f"{ORCH}.probe", return_value=profile), \
             patch(f"{ORCH}.download_file", side_effect=_fake_download), \
             patch(f"{ORCH}.download_model", return_value=True) as model, \
             patch(f"{ORCH}.validate", return_value=validation) as validate:
            result = run_install(
                settings, home=home, system="Linux", machine="x86_64",
                manifest=kw.pop("manifest", make_manifest(*ReleaseVariant)), **kw,
            )
        return result, model, validate

    def test_cpu_host(self, home, no_model):
        result, model, validate = self._run(no_model, home, NO_GPU)

        layout = result.layout
        assert result.resolution.filename == "remembrances-mcp-embedded-cpu-linux-x86_64.zip"
        assert layout.binary_path.is_file()
        assert (layout.bin_dir / "libllama.so").is_file()
        assert (layout.config_dir / "config.sample.gguf.yaml").is_file()
        assert result.config_file == layout.config_dir / "config.yaml"
        validate.assert_not_called()
        model.assert_not_called()
        assert result.model_downloaded is False
        assert str(layout.bin_dir) in (home / ".bashrc").read_text()
        assert "LD_LIBRARY_PATH" not in (home / ".bashrc").read_text()

    def test_cpu_fallback_asset(self, home, no_model):
        manifest = make_manifest(ReleaseVariant.LINUX_CPU)
        result, _, _ = self._run(no_model, home, NO_GPU, manifest=manifest)
        assert result.resolution.fell_back
        assert result.resolution.filename == "remembrances-mcp-cpu-linux-x86_64.zip"

    def test_gpu_with_runtime_present(self, home, no_model):
        result, _, validate = self._run(
            no_model, home, GPU, validation=ValidationOutcome.resolvable("ldd"),
        )
        validate.assert_called_once()
        assert validate.call_args[0][0] == result.layout.bin_dir / "libllama.so"
        assert result.remediation_plan is None
        assert result.gpu_acceleration_ready

    def test_gpu_missing_runtime_remediated(self, home, no_model):
        lib_dir = home / ".local" / "lib"
        applied = RemediationResult(applied=True, copied=["libcudart.so.12"], target_dir=lib_dir)
        missing = ValidationOutcome.missing_libs(["libcudart.so.12"], "presence")
        with patch(f"{ORCH}.apply_remediation", return_value=applied) as apply:
            result, _, _ = self._run(no_model, home, GPU, validation=missing)
        plan = apply.call_args[0][0]
        assert plan.should_apply
        assert plan.target_dir == lib_dir
        assert result.gpu_acceleration_ready
        rc = (home / ".bashrc").read_text()
        assert f'LD_LIBRARY_PATH="{lib_dir}:' in rc

    def test_remediation_failure_keeps_install(self, home, no_model):
        missing = ValidationOutcome.missing_libs(["libcublas.so.12"], "ldd")
        with patch(f"{ORCH}.apply_remediation", side_effect=RemediationError("no network")):
            result, _, _ = self._run(no_model, home, GPU, validation=missing)
        assert result.remediation_error == "no network"
        assert result.layout.binary_path.is_file()
        assert result.config_file is not None
        assert not result.gpu_acceleration_ready
        assert "LD_LIBRARY_PATH" not in (home / ".bashrc").read_text()

    def test_remediation_stream_cut_off_keeps_install(self, home, no_model):
        missing = ValidationOutcome.missing_libs(["libcudart.so.12"], "presence")
        cut_off = http.client.IncompleteRead(b"", 950)
        with patch("urllib.request.urlopen", side_effect=cut_off):
            result, _, _ = self._run(no_model, home, GPU, validation=missing)
        assert "IncompleteRead" in result.remediation_error
        assert result.layout.binary_path.is_file()
        assert not result.gpu_acceleration_ready

    def test_skip_cuda_libs(self, home):
        settings = InstallerSettings(download_model="no", skip_cuda_libs=True)
        missing = ValidationOutcome.missing_libs(["libcudart.so.12"], "presence")
        with patch.object(orchestrator, "apply_remediation", wraps=orchestrator.apply_remediation) as apply, \
             patch("remembrances_installer.core.services.install.execution.cuda_runtime.download_file") as dl:
            result, _, _ = self._run(settings, home, GPU, validation=missing)
            dl.assert_not_called()
        assert apply.call_args[0][0].skipped
        assert result.remediation_error is None
        assert not result.gpu_acceleration_ready

    def test_forced_cpu_on_gpu_host(self, home):
        settings = InstallerSettings(nvidia="no", download_model="no")
        result, _, validate = self._run(settings, home, GPU)
        assert result.resolution.filename == "remembrances-mcp-embedded-cpu-linux-x86_64.zip"
        validate.assert_not_called()

    def test_wizard_declines_model(self, home):
        prompter = Answers(nvidia=False, gguf=False)
        result, model, _ = self._run(InstallerSettings(), home, GPU, prompter=prompter)
        assert result.preference.want_nvidia is False
        model.assert_not_called()
        assert len(prompter.asked) == 2

    def test_model_downloaded_by_default(self, home):
        result, model, _ = self._run(InstallerSettings(), home, NO_GPU)
        model.assert_called_once()
        assert model.call_args[0][1] == result.layout.models_dir / InstallerSettings().model_name
        assert result.model_downloaded is True

    def test_darwin_never_validates_runtime(self, home, no_model):
        with patch(f"{ORCH}.probe", wraps=orchestrator.probe) as probe, \
             patch(f"{ORCH}.download_file", side_effect=_fake_download), \
             patch(f"{ORCH}.validate") as validate:
            result = run_install(
                no_model, home=home, system="Darwin", machine="arm64",
                manifest=make_manifest(*ReleaseVariant),
            )
        validate.assert_not_called()
        probe.assert_called_once()
        assert result.profile == CapabilityProfile.unknown()
        assert result.resolution.filename == "remembrances-mcp-darwin-aarch64-embedded.zip"
        base = home / "Library" / "Application Support" / "remembrances"
        assert result.layout.install_dir == base
        assert result.layout.binary_path.is_file()
        assert result.config_file == base / "config.yaml"
        assert result.remediation_plan is None

    def test_to_dict(self, home, no_model):
        result, _, _ = self._run(no_model, home, NO_GPU)
        data = result.to_dict()
        assert data["asset"]["filename"] == "remembrances-mcp-embedded-cpu-linux-x86_64.zip"
        assert data["layout"]["bin_dir"] == str(result.layout.bin_dir)
        assert data["capabilities"]["has_avx2"] is True


class TestDescribeHost:
    def test_report(self, no_model):
        with patch(f"{ORCH}.probe", return_value=GPU):
            report = describe_host(no_model, system="Linux", machine="x86_64")
        data = report.to_dict()
        assert data["platform"] == {"os": "linux", "arch": "amd64", "supported": True}
        assert data["filename"] == "remembrances-mcp-embedded-cuda-portable-linux-x86_64.zip"
        assert data["default_preference"] == {"want_nvidia": True, "want_portable": True}

    def test_override_applies(self):
        settings = InstallerSettings(nvidia="yes", portable="no")
        with patch(f"{ORCH}.probe", return_value=NO_GPU):
            report = describe_host(settings, system="Linux", machine="x86_64")
        assert report.filename == "remembrances-mcp-embedded-cuda-linux-x86_64.zip"
