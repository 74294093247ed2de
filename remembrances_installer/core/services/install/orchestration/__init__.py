"""L5 Orchestration: the end-to-end install run."""

from remembrances_installer.core.services.install.orchestration.orchestrator import (  # noqa: F401
    HostReport,
    InstallResult,
    describe_host,
    run_install,
)
