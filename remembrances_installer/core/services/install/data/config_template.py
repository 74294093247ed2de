"""
L0 Data: Template for the generated ``config.yaml``.

Placeholders use ``{name}`` and are filled by
``execution.config.render_template``.
"""

CONFIG_TEMPLATE = """\
# Remembrances-MCP Configuration
# Generated by remembrances-installer on {generated_at}
#
# For all available options, see config.sample.gguf.yaml
#
# Environment variables use the GOMEM_ prefix (e.g., GOMEM_SSE_ADDR).
# Command-line flags take precedence over YAML, and environment variables over both.

# Path to the knowledge base directory
knowledge-base: "{kb_path}"

# ========== SurrealDB Configuration ==========
# Path to the embedded SurrealDB database
db-path: "{db_path}"

# SurrealDB credentials
surrealdb-user: "root"
surrealdb-pass: "root"
surrealdb-namespace: "test"
surrealdb-database: "test"

# ========== GGUF Local Model Configuration ==========
# Path to GGUF model file for local embeddings
# Using nomic-embed-text v1.5 for high-quality embeddings
gguf-model-path: "{model_path}"

# Number of threads for GGUF model (0 = auto-detect)
gguf-threads: 0

# Number of GPU layers for GGUF model (0 = CPU only)
# Increase this value if you have a GPU to offload computation
gguf-gpu-layers: 0

# ========== Text Chunking Configuration ==========
# Maximum chunk size in characters for text splitting
chunk-size: 1500

# Overlap between chunks in characters
chunk-overlap: 200

# ========== Logging Configuration ==========
# Uncomment to enable logging to file
#log: "{log_path}"
"""
