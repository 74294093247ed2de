"""
L0 Data: Install constants.

Release naming, CUDA runtime SONAMEs, probe paths, and default URLs.
No logic.
"""

from __future__ import annotations

# ── Release ──────────────────────────────────────────────────

APP_NAME = "remembrances-mcp"
DEFAULT_REPO = "madeindigio/remembrances-mcp"
GITHUB_API = "https://api.github.com"

BINARY_NAME = "remembrances-mcp"
SAMPLE_CONFIGS = ("config.sample.yaml", "config.sample.gguf.yaml")

# ── CUDA runtime ─────────────────────────────────────────────

CUDA_RUNTIME_SONAME = "libcudart.so.12"
REQUIRED_CUDA_SONAMES: tuple[str, ...] = (
    "libcudart.so.12",
    "libcublas.so.12",
    "libcublasLt.so.12",
)

# Native library linked against CUDA in the NVIDIA builds
CUDA_DEPENDENT_LIBRARY = "libllama.so"

CUDA_WELL_KNOWN_PATHS: tuple[str, ...] = (
    "/usr/local/cuda/lib64/libcudart.so.12",
    "/usr/local/cuda/lib64/libcudart.so.12.0",
)

# Searched in order after the ldconfig cache
LIBRARY_SEARCH_DIRS: tuple[str, ...] = (
    "/usr/local/cuda/lib64",
    "/usr/lib/x86_64-linux-gnu",
    "/lib/x86_64-linux-gnu",
    "/usr/lib64",
    "/lib64",
    "/usr/lib",
    "/lib",
)

CUDA_LIBS_URL = (
    "https://github.com/madeindigio/remembrances-mcp/releases/download/"
    "v1.16.4/cuda-libs-linux-x64.tar.xz"
)

# ── System probes ────────────────────────────────────────────

CPUINFO_PATH = "/proc/cpuinfo"
GPU_MANAGEMENT_COMMAND = "nvidia-smi"
PROBE_TIMEOUT = 10

# ── Embedding model ──────────────────────────────────────────

GGUF_MODEL_URL = (
    "https://huggingface.co/nomic-ai/nomic-embed-text-v1.5-GGUF/resolve/main/"
    "nomic-embed-text-v1.5.Q4_K_M.gguf?download=true"
)
GGUF_MODEL_NAME = "nomic-embed-text-v1.5.Q4_K_M.gguf"

# ── Shell setup ──────────────────────────────────────────────

SHELL_MARKER = "# Remembrances-MCP"
