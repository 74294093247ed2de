"""
L3 Detection: ``__init__.py`` re-exports all detection functions.

These functions READ system state but never WRITE.
Subprocess calls, file reads, env var reads: all read-only.
"""

from remembrances_installer.core.services.install.detection.hardware import (  # noqa: F401
    cpu_has_feature,
    cuda_from_driver,
    cuda_from_linker_cache,
    cuda_from_paths,
    detect_cuda_major_version,
    gpu_present,
    probe,
    read_cpu_flags,
)
from remembrances_installer.core.services.install.detection.platform_id import (  # noqa: F401
    identify,
    require_supported,
)
from remembrances_installer.core.services.install.detection.runtime_deps import (  # noqa: F401
    check_presence,
    check_with_ldd,
    locate_cuda_library,
    parse_ldd_output,
    validate,
)
from remembrances_installer.core.services.install.detection.shared_libs import (  # noqa: F401
    read_linker_cache,
    shared_lib_exists,
    soname_in_cache,
    soname_in_dirs,
)
